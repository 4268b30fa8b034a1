"""mol2grep.query: the query table matched against mol2 records."""

from mol2grep.query.table import QueryTable, load_query_table

__all__ = ["QueryTable", "load_query_table"]
