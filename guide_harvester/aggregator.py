"""
Topic tree aggregates: node totals and per-subject weight flattening.
"""

from typing import TYPE_CHECKING, Dict, Iterator, List, Sequence

if TYPE_CHECKING:
    from .models import Subject, Topic


def compute_total(topics: Sequence['Topic']) -> int:
    """Number of Topic nodes in the whole forest (0 for an empty sequence)."""
    return sum(1 + compute_total(topic.sub_topics) for topic in topics)


def iter_topics(topics: Sequence['Topic']) -> Iterator['Topic']:
    """Yield every topic in pre-order, grouping nodes included."""
    for topic in topics:
        yield topic
        if topic.sub_topics:
            yield from iter_topics(topic.sub_topics)


def extract_weights(subjects: List['Subject']) -> Dict[str, Dict[str, int]]:
    """
    Flatten each subject's tree into ``{subject_id: {topic_text: count}}``.

    A topic text seen again later in pre-order overwrites the earlier weight.
    """
    weights: Dict[str, Dict[str, int]] = {}
    for subject in subjects:
        subject_weights: Dict[str, int] = {}
        for topic in iter_topics(subject.topics):
            if topic.topic_text:
                subject_weights[topic.topic_text] = topic.question_count
        weights[subject.id] = subject_weights
    return weights
