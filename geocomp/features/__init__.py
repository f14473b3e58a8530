"""Feature tables: attribute rows paired with geometries.

Commonly used exports:
- FeatureTable: attribute store + geometry store with sticky geometry
- aggregate: group features and combine their geometries
- attribute_join: join attributes onto features, keeping left geometries
- read_table: read vector files
"""

from geocomp.features.aggregation import aggregate
from geocomp.features.joins import attribute_join
from geocomp.features.table import FeatureTable
from geocomp.features.io import read_table

__all__ = [
    "FeatureTable",
    "aggregate",
    "attribute_join",
    "read_table",
]
