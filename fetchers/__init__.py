# fetchers/__init__.py
from . import lametric

FETCHERS = {
    "lametric": lametric.LaMetricFetcher,
}
