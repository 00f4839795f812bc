"""
Core data layer.

This package contains:
- measure / area / areas: the in-memory model and the dataset parsers
- datasets: format tags, column roles and the known dataset registry
- input_source: file and HTTP sources for dataset streams
- loader: load the registry of datasets into an Areas instance
- render: JSON, text table and DataFrame views of the loaded data
"""
