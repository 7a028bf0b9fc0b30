import pytest

from tests.support.stubs import QUEEN_INFO


@pytest.fixture
def workflow(store, enrichment_stub):
    from songlibrary.domain.catalog import AddSongWorkflow

    return AddSongWorkflow(store=store, enrichment=enrichment_stub)


@pytest.mark.unit
def test_known_song_is_persisted_with_metadata_and_published(workflow, store, enrichment_stub, db_session):
    from songlibrary.domain.catalog import AddSongState

    result = workflow.run({"group": "Queen", "song": "Bohemian Rhapsody"})

    assert result.state is AddSongState.DONE
    assert result.song_id > 0
    entry = store.get_entry(result.song_id)
    assert entry.release_date == QUEEN_INFO.release_date
    assert entry.text == QUEEN_INFO.text
    assert entry.link == QUEEN_INFO.link
    assert enrichment_stub.published == [(QUEEN_INFO, result.song_id)]


@pytest.mark.unit
def test_title_alias_is_accepted(workflow, db_session):
    result = workflow.run({"group": " Queen ", "title": "Bohemian Rhapsody"})
    assert result.group == "Queen"
    assert result.title == "Bohemian Rhapsody"


@pytest.mark.unit
@pytest.mark.parametrize(
    "payload",
    [None, [], {"group": "Queen"}, {"song": "Bohemian Rhapsody"}, {"group": "", "song": "x"}, {"group": "   ", "song": "x"}],
)
def test_invalid_payload_stops_before_enrichment(workflow, enrichment_stub, store, db_session, payload):
    from songlibrary.domain.catalog import AddSongState, ClientInputError

    with pytest.raises(ClientInputError) as excinfo:
        workflow.run(payload)

    assert excinfo.value.state is AddSongState.VALIDATING
    assert enrichment_stub.fetch_calls == []
    assert store.list_all() == []


@pytest.mark.unit
def test_unrecognized_song_is_rejected_without_side_effects(workflow, enrichment_stub, store, db_session):
    from songlibrary.domain.catalog import AddSongState, RejectedSongError

    with pytest.raises(RejectedSongError) as excinfo:
        workflow.run({"group": "Unknown", "song": "Nonexistent Song"})

    assert excinfo.value.state is AddSongState.REJECTED
    assert excinfo.value.status_code == 400
    assert store.list_all() == []
    assert enrichment_stub.published == []


@pytest.mark.unit
def test_enrichment_outage_is_enrich_failed(workflow, enrichment_stub, store, db_session):
    from songlibrary.domain.catalog import AddSongState, DependencyError

    enrichment_stub.fail_fetch()
    with pytest.raises(DependencyError) as excinfo:
        workflow.run({"group": "Queen", "song": "Bohemian Rhapsody"})

    assert excinfo.value.state is AddSongState.ENRICH_FAILED
    assert excinfo.value.status_code == 502
    assert store.list_all() == []


@pytest.mark.unit
def test_duplicate_song_is_persist_failed_and_not_published_again(workflow, enrichment_stub, store, db_session):
    from songlibrary.domain.catalog import AddSongState, ConflictError

    workflow.run({"group": "Queen", "song": "Bohemian Rhapsody"})
    with pytest.raises(ConflictError) as excinfo:
        workflow.run({"group": "Queen", "song": "Bohemian Rhapsody"})

    assert excinfo.value.state is AddSongState.PERSIST_FAILED
    assert len(store.list_all()) == 1
    assert len(enrichment_stub.published) == 1


@pytest.mark.unit
def test_publish_failure_keeps_created_song(workflow, enrichment_stub, store, db_session):
    from songlibrary.domain.catalog import AddSongState, DependencyError

    enrichment_stub.fail_publish()
    with pytest.raises(DependencyError) as excinfo:
        workflow.run({"group": "Queen", "song": "Bohemian Rhapsody"})

    assert excinfo.value.state is AddSongState.PUBLISH_FAILED
    entries = store.list_all()
    assert len(entries) == 1
    assert entries[0].text == QUEEN_INFO.text
