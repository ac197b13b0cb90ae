from enum import Enum


class PartitionTag(str, Enum):
    UNASSIGNED = "UNASSIGNED"
    TRAIN = "TRAIN"
    VALIDATION = "VALIDATION"
    TEST = "TEST"


class DatasetFormat(str, Enum):
    BOX_MAP = "box_map"
    AUTOML = "automl"
    CORNER_MAP = "corner_map"
    TENSORFLOW = "tensorflow"


class ExhaustedPolicy(str, Enum):
    """What to do with a capture whose jitter attempts never produced an in-frame box."""

    KEEP = "keep"
    FLAG = "flag"
    DISCARD = "discard"
