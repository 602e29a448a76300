"""
Study Plan Data Model
Topic tree, subjects and the assembled plan document.
"""

import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .aggregator import compute_total

# Subject colors, assigned round-robin in creation order
SUBJECT_COLORS = (
    '#ef4444',
    '#3b82f6',
    '#22c55e',
    '#eab308',
    '#8b5cf6',
    '#ec4899',
)


def color_for_index(index: int) -> str:
    """Return the palette color for the subject created at ``index``."""
    return SUBJECT_COLORS[index % len(SUBJECT_COLORS)]


@dataclass
class Topic:
    """
    A node of a subject's topic outline.
    """
    topic_text: str
    sub_topics: List['Topic'] = field(default_factory=list)
    question_count: int = 0

    @property
    def is_grouping_topic(self) -> bool:
        return bool(self.sub_topics)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON export."""
        return {
            'topic_text': self.topic_text,
            'sub_topics': [t.to_dict() for t in self.sub_topics],
            'question_count': self.question_count,
            'is_grouping_topic': self.is_grouping_topic,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Topic':
        return cls(
            topic_text=data['topic_text'],
            sub_topics=[cls.from_dict(t) for t in data.get('sub_topics') or []],
            question_count=data.get('question_count') or 0,
        )


@dataclass
class Subject:
    """
    One subject of the plan with its root-level topics.
    """
    id: str
    subject: str
    color: str
    topics: List[Topic] = field(default_factory=list)
    total_topics_count: int = 0

    @classmethod
    def create(cls, name: str, topics: List[Topic], index: int) -> 'Subject':
        """
        Build a subject with a fresh id, its palette color and topic total.

        Args:
            name: Display name of the subject
            topics: Root-level topics extracted from the subject page
            index: Creation order of this subject within the import
        """
        return cls(
            id=str(uuid.uuid4()),
            subject=name,
            color=color_for_index(index),
            topics=list(topics),
            total_topics_count=compute_total(topics),
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'subject': self.subject,
            'color': self.color,
            'topics': [t.to_dict() for t in self.topics],
            'total_topics_count': self.total_topics_count,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Subject':
        return cls(
            id=data['id'],
            subject=data['subject'],
            color=data['color'],
            topics=[Topic.from_dict(t) for t in data.get('topics') or []],
            total_topics_count=data.get('total_topics_count') or 0,
        )


@dataclass
class HeaderData:
    """Fields read from the header page."""
    name: str = ""
    cargo: str = ""
    edital: str = ""
    icon_url: str = ""
    banca: str = ""


@dataclass
class PlanData:
    """
    The assembled study-plan document written once per import.
    """
    name: str
    cargo: str
    edital: str
    banca: str = ""
    icon_url: Optional[str] = None
    subjects: List[Subject] = field(default_factory=list)
    banca_topic_weights: Dict[str, Dict[str, int]] = field(default_factory=dict)

    @property
    def total_topics(self) -> int:
        return sum(s.total_topics_count for s in self.subjects)

    def to_dict(self) -> dict:
        """Convert to the persisted JSON shape (``iconUrl`` omitted when absent)."""
        data = {
            'name': self.name,
            'cargo': self.cargo,
            'edital': self.edital,
            'banca': self.banca,
        }
        if self.icon_url:
            data['iconUrl'] = self.icon_url
        data['subjects'] = [s.to_dict() for s in self.subjects]
        data['bancaTopicWeights'] = {
            subject_id: dict(weights)
            for subject_id, weights in self.banca_topic_weights.items()
        }
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'PlanData':
        """Rebuild a plan from its persisted JSON shape."""
        return cls(
            name=data.get('name', ''),
            cargo=data.get('cargo', ''),
            edital=data.get('edital', ''),
            banca=data.get('banca') or '',
            icon_url=data.get('iconUrl'),
            subjects=[Subject.from_dict(s) for s in data.get('subjects') or []],
            banca_topic_weights={
                k: dict(v) for k, v in (data.get('bancaTopicWeights') or {}).items()
            },
        )
