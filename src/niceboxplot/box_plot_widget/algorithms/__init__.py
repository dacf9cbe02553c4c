"""Algorithms behind the box plot render pass.

Pure functions over the data view structures, in dependency order:
hierarchy flattening, color binding, category grouping, box statistics and
marker-line derivation. Nothing here touches NiceGUI or Plotly.
"""
