from .builtin import Aggregate, count, custom, maximum, mean, minimum, sd, total
from .group import group_aggregate
from .reducer import MISSING, Reducer, as_reducer, reducer

__all__ = [
    'Aggregate', 'MISSING', 'Reducer', 'as_reducer', 'count', 'custom',
    'group_aggregate', 'maximum', 'mean', 'minimum', 'reducer', 'sd', 'total',
]
