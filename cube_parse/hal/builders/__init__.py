from .aggregation_tree import AggregationTree, Leaf
from .variant_grouper import GroupedTree, group_by_support, flatten_groups, group_tree
from .render_features import render_features
from .render_pin_traits import render_pin_traits
