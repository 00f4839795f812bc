"""
Streamlit explorer for loaded datasets.
"""
