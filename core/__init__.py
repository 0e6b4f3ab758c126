"""Core (UI-agnostic) DataDash logic.

This package contains:
- dataset ingestion (CSV/XLSX -> row objects) and column type inference
- chart config building and per-chart-type series mapping
- chart helpers (Altair -> Vega-Lite spec dict)
- dashboard layout assembly, data preview and summary statistics
- the in-memory store shared by the API and the Streamlit app
"""
