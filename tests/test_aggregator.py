"""
Tests for topic totals, weight flattening and subject creation.
"""

from guide_harvester.aggregator import compute_total, extract_weights, iter_topics
from guide_harvester.models import SUBJECT_COLORS, PlanData, Subject, Topic


def _tree():
    return [
        Topic("Cap. 1", [
            Topic("Art. 1", [Topic("Inciso I", question_count=1)], question_count=2),
            Topic("Art. 2", question_count=3),
        ], question_count=5),
        Topic("Cap. 2"),
    ]


class TestComputeTotal:
    """Node counts over whole subtrees."""

    def test_empty(self):
        assert compute_total([]) == 0

    def test_matches_preorder_traversal(self):
        tree = _tree()
        assert compute_total(tree) == len(list(iter_topics(tree))) == 5

    def test_preorder_order(self):
        assert [t.topic_text for t in iter_topics(_tree())] == [
            "Cap. 1", "Art. 1", "Inciso I", "Art. 2", "Cap. 2",
        ]


class TestExtractWeights:
    """Per-subject topic -> count flattening."""

    def test_includes_grouping_nodes(self):
        subject = Subject.create("Direito", _tree(), 0)
        weights = extract_weights([subject])
        assert weights == {
            subject.id: {
                "Cap. 1": 5, "Art. 1": 2, "Inciso I": 1, "Art. 2": 3, "Cap. 2": 0,
            }
        }

    def test_later_duplicate_wins(self):
        topics = [
            Topic("Introdução", question_count=2),
            Topic("Parte geral", [Topic("Introdução", question_count=4)]),
        ]
        subject = Subject.create("Português", topics, 0)
        assert extract_weights([subject])[subject.id]["Introdução"] == 4

    def test_weights_are_per_subject(self):
        a = Subject.create("A", [Topic("Introdução", question_count=1)], 0)
        b = Subject.create("B", [Topic("Introdução", question_count=9)], 1)
        weights = extract_weights([a, b])
        assert weights[a.id]["Introdução"] == 1
        assert weights[b.id]["Introdução"] == 9

    def test_subject_without_topics_gets_empty_mapping(self):
        subject = Subject.create("Vazia", [], 0)
        assert extract_weights([subject]) == {subject.id: {}}


class TestSubjectCreate:
    """Ids, colors and totals assigned at creation."""

    def test_total_topics_count(self):
        assert Subject.create("Direito", _tree(), 0).total_topics_count == 5

    def test_ids_are_unique(self):
        ids = {Subject.create(f"S{i}", [], i).id for i in range(20)}
        assert len(ids) == 20

    def test_colors_cycle_every_six(self):
        subjects = [Subject.create(f"S{i}", [], i) for i in range(7)]
        assert [s.color for s in subjects[:6]] == list(SUBJECT_COLORS)
        assert subjects[6].color == subjects[0].color


class TestPlanSerialization:
    """Persisted JSON shape."""

    def test_icon_omitted_when_absent(self):
        plan = PlanData(name="X", cargo="Y", edital="Z")
        data = plan.to_dict()
        assert "iconUrl" not in data
        assert data["bancaTopicWeights"] == {}
        assert data["banca"] == ""

    def test_topic_keys(self):
        data = Topic("A", [Topic("B")], question_count=2).to_dict()
        assert data == {
            "topic_text": "A",
            "sub_topics": [{
                "topic_text": "B", "sub_topics": [], "question_count": 0,
                "is_grouping_topic": False,
            }],
            "question_count": 2,
            "is_grouping_topic": True,
        }

    def test_from_dict_restores_plan(self):
        subject = Subject.create("Direito", _tree(), 2)
        plan = PlanData(
            name="TRF", cargo="Analista", edital="01/2024", banca="FCC",
            icon_url="data:image/png;base64,AAAA", subjects=[subject],
            banca_topic_weights=extract_weights([subject]),
        )
        assert PlanData.from_dict(plan.to_dict()) == plan
