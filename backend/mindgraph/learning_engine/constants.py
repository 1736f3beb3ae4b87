"""Constants for learning engine algorithms."""

from enum import Enum


class ItemType(str, Enum):
    """Kind of tracked artifact behind a revision item."""

    PROBLEM = "problem"
    LEARNING = "learning"


class NodeType(str, Enum):
    """Knowledge graph node kinds."""

    CONCEPT = "concept"
    SKILL = "skill"
    TOPIC = "topic"
    RESOURCE = "resource"


class RelationshipType(str, Enum):
    """Edge relationship kinds."""

    PREREQUISITE = "prerequisite"
    RELATED = "related"
    DEPENDS_ON = "depends_on"
    LEADS_TO = "leads_to"


class SubjectKind(str, Enum):
    """What a review submission refers to."""

    ITEM = "item"
    NODE = "node"


class Preset(str, Enum):
    """Named scheduler parameter bundles."""

    GENTLE = "gentle"
    BALANCED = "balanced"
    INTENSIVE = "intensive"


class RevisionState(str, Enum):
    """Revision item lifecycle state."""

    SCHEDULED = "SCHEDULED"
    DUE = "DUE"
    COMPLETED = "COMPLETED"


class NodeStatus(str, Enum):
    """Node metric status used by the revision queue."""

    DUE = "due"
    STALE = "stale"
    OK = "ok"


class MasteryTier(str, Enum):
    """Display tier for a node's strength."""

    NOT_STUDIED = "NOT_STUDIED"
    NEEDS_WORK = "NEEDS_WORK"
    IN_PROGRESS = "IN_PROGRESS"
    GOOD = "GOOD"
    MASTERED = "MASTERED"
    RAW = "RAW"


class StrengthScale(str, Enum):
    """External representations of strength accepted at ingestion."""

    UNIT = "unit"  # 0..1
    PERCENT = "percent"  # 0..100 (legacy)
    MASTERY_5 = "mastery_5"  # 1..5
