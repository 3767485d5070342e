"""
Policy Objects.

Label group schemas, the href-keyed lookup table and group expansion.
"""

from pceclient.policy.expand import expand_label_group
from pceclient.policy.lookup import LabelGroupTable
from pceclient.policy.schemas import LabelGroup, LabelRef, SubGroupRef, Usage

__all__ = [
    "LabelGroup",
    "LabelGroupTable",
    "LabelRef",
    "SubGroupRef",
    "Usage",
    "expand_label_group",
]
