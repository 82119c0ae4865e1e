"""
Transport Management System console.

Domain core (status lifecycle, freight/payment metrics, role access)
plus in-memory entity stores and a Streamlit presentation layer.
"""

__version__ = "0.1.0"
