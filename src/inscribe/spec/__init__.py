"""
Spec - Action schemas and the data model of the write pipeline.
"""
