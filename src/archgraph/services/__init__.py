"""
Domain services for ArchGraph.

Contains the main business logic services:
- graph_editor: Delta parsing, merging and persistence of architecture graphs
"""
