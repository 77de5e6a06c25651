from plume.core.registry import Registry
from plume.core.taxonomy import Taxonomy


def test_new_label_mints_tag_id_through_registry(registry: Registry, taxonomy: Taxonomy):
    registry.assure("POST:a")

    tag_id = taxonomy.assure_label_from_document("python", 1)

    assert tag_id == 2
    assert registry.lookup("TAG:python") == 2
    assert taxonomy.tags[0].mentions == [1]


def test_repeated_mention_is_recorded_once(taxonomy: Taxonomy):
    first = taxonomy.assure_label_from_document("python", 7)
    second = taxonomy.assure_label_from_document("python", 7)

    assert first == second
    assert taxonomy.find("python").mentions == [7]


def test_mentions_keep_insertion_order(taxonomy: Taxonomy):
    for post_id in (3, 1, 2, 1):
        taxonomy.assure_label_from_document("news", post_id)

    assert taxonomy.find("news").mentions == [3, 1, 2]


def test_labels_are_case_sensitive(taxonomy: Taxonomy):
    lower = taxonomy.assure_label_from_document("go", 1)
    upper = taxonomy.assure_label_from_document("Go", 1)

    assert lower != upper
    assert [tag.label for tag in taxonomy.tags] == ["go", "Go"]


def test_existing_tag_keeps_registry_id_across_runs(registry: Registry):
    registry.assure("POST:a")
    registry.assure("TAG:old")

    taxonomy = Taxonomy(registry)
    assert taxonomy.assure_label_from_document("old", 1) == 2
    assert len(registry) == 2


def test_get_by_id(taxonomy: Taxonomy):
    tag_id = taxonomy.assure_label_from_document("misc", 1)

    assert taxonomy.get(tag_id).label == "misc"
    assert taxonomy.get(999) is None
