"""
knimesql: Translate KNIME workflow nodes into standard SQL.

Rebuilds a workflow graph from its descriptor and per-node settings trees,
then dispatches selected nodes to translators that approximate each node's
semantics as a SQL statement.
"""

__version__ = "0.2.0"
