from __future__ import annotations

import pytest

from metafetcher.clients import CinemetaClient
from metafetcher.errors import CacheDirError, DataDirError, MetaWriteError
from metafetcher.models import FetchOutcome, SkipReason
from metafetcher.services.csv_input import MissingIdColumnError
from metafetcher.workflow import orchestrator
from metafetcher.workflow.orchestrator import resolve_csv, run_sync, sync_csv


def _client(fake_session, fake_response, meta_url, metas):
    routes = {
        meta_url.format(identifier=identifier): fake_response(body=body.encode("utf-8"))
        for identifier, body in metas.items()
    }
    session = fake_session(routes)
    return CinemetaClient(url_template=meta_url, session=session), session


def test_resolve_csv_scenario(settings, data_dir, csv_writer):
    csv_path = csv_writer(data_dir / "list.csv", [["Title", "IMDb ID"], ["A", "tt001"], ["B", "tt002"]])
    (settings.metas_dir / "tt001.json").write_text("{}", encoding="utf-8")

    result = resolve_csv(csv_path, settings)

    assert result.missing == ["tt002"]
    assert result.metrics.required == 2
    assert result.metrics.cache_hits == 1


def test_sync_csv_writes_raw_meta(settings, data_dir, csv_writer, fake_session, fake_response, meta_url, sleep_recorder):
    csv_path = csv_writer(data_dir / "list.csv", [["Title", "IMDb ID"], ["A", "tt001"], ["B", "tt002"]])
    (settings.metas_dir / "tt001.json").write_text("{}", encoding="utf-8")
    client, session = _client(
        fake_session, fake_response, meta_url, {"tt002": '{"meta":{"id":"tt002","name":"B"}}'}
    )

    result = sync_csv(csv_path, settings, client=client, sleep=sleep_recorder)

    assert [call["url"] for call in session.calls] == [meta_url.format(identifier="tt002")]
    assert result.written == [settings.metas_dir / "tt002.json"]
    assert (settings.metas_dir / "tt002.json").read_text(encoding="utf-8") == '{"id":"tt002","name":"B"}'
    assert result.metrics.produced == 1
    assert result.metrics.skipped == 0
    assert sleep_recorder.calls == []


def test_run_sync_twice_is_idempotent(settings, data_dir, csv_writer, fake_session, fake_response, meta_url, sleep_recorder):
    csv_writer(data_dir / "list.csv", [["IMDb ID"], ["tt1"], ["tt2"], ["tt3"]])
    client, session = _client(
        fake_session,
        fake_response,
        meta_url,
        {identifier: f'{{"meta": {{"id": "{identifier}"}}}}' for identifier in ("tt1", "tt2", "tt3")},
    )

    first = run_sync(settings=settings, client=client, sleep=sleep_recorder)
    second = run_sync(settings=settings, client=client, sleep=sleep_recorder)

    assert first[0].missing == ["tt1", "tt2", "tt3"]
    assert second[0].missing == []
    assert second[0].outcomes == []
    assert len(session.calls) == 3
    assert sleep_recorder.calls == [settings.request_delay] * 2


def test_run_sync_skips_failures_and_retries_them_next_run(
    settings, data_dir, csv_writer, fake_session, fake_response, meta_url, sleep_recorder
):
    csv_writer(data_dir / "list.csv", [["IMDb ID"], ["tt_ok"], ["tt_gone"]])
    client, _ = _client(fake_session, fake_response, meta_url, {"tt_ok": '{"meta": {"id": 1}}'})

    result = run_sync(settings=settings, client=client, sleep=sleep_recorder)[0]

    assert result.skip_reasons() == {"tt_gone": SkipReason.BAD_STATUS}
    assert result.metrics.produced == 1
    assert result.metrics.skipped == 1
    assert sorted(path.name for path in settings.metas_dir.iterdir()) == ["tt_ok.json"]

    rerun = run_sync(settings=settings, dry_run=True)
    assert rerun[0].missing == ["tt_gone"]


def test_run_sync_retakes_inventory_per_csv(settings, data_dir, csv_writer, fake_session, fake_response, meta_url, sleep_recorder):
    csv_writer(data_dir / "a.csv", [["IMDb ID"], ["tt1"]])
    csv_writer(data_dir / "b.csv", [["Title", "IMDb ID"], ["X", "tt1"], ["Y", "tt2"]])
    csv_writer(data_dir / "notes.txt", [["IMDb ID"], ["tt9"]])
    client, session = _client(
        fake_session, fake_response, meta_url, {"tt1": '{"meta": 1}', "tt2": '{"meta": 2}'}
    )

    results = run_sync(settings=settings, client=client, sleep=sleep_recorder)

    assert [result.csv_path.name for result in results] == ["a.csv", "b.csv"]
    assert results[1].missing == ["tt2"]
    assert [call["url"] for call in session.calls] == [
        meta_url.format(identifier="tt1"),
        meta_url.format(identifier="tt2"),
    ]


def test_run_sync_keeps_delay_across_csv_files(settings, data_dir, csv_writer, fake_session, fake_response, meta_url, sleep_recorder):
    csv_writer(data_dir / "a.csv", [["IMDb ID"], ["tt1"]])
    csv_writer(data_dir / "b.csv", [["IMDb ID"], ["tt2"]])
    client, session = _client(
        fake_session, fake_response, meta_url, {"tt1": '{"meta": 1}', "tt2": '{"meta": 2}'}
    )

    run_sync(settings=settings, client=client, sleep=sleep_recorder)

    assert len(session.calls) == 2
    assert sleep_recorder.calls == [settings.request_delay]


def test_duplicates_pass_through_unless_deduplicated(settings, data_dir, csv_writer, fake_session, fake_response, meta_url, sleep_recorder):
    csv_path = csv_writer(data_dir / "dupes.csv", [["IMDb ID"], ["tt1"], ["tt1"]])

    assert resolve_csv(csv_path, settings).missing == ["tt1", "tt1"]

    deduped = settings.merge_overrides({"deduplicate": True})
    client, session = _client(fake_session, fake_response, meta_url, {"tt1": '{"meta": 1}'})
    result = sync_csv(csv_path, deduped, client=client, sleep=sleep_recorder)

    assert result.missing == ["tt1"]
    assert len(session.calls) == 1


def test_missing_metas_dir_is_fatal(settings, data_dir, csv_writer):
    settings.metas_dir.rmdir()
    csv_writer(data_dir / "list.csv", [["IMDb ID"], ["tt1"]])

    with pytest.raises(CacheDirError):
        run_sync(settings=settings, dry_run=True)


def test_create_metas_dir_option(settings, data_dir, csv_writer, fake_session, fake_response, meta_url, sleep_recorder):
    settings.metas_dir.rmdir()
    csv_writer(data_dir / "list.csv", [["IMDb ID"], ["tt1"]])
    creating = settings.merge_overrides({"create_metas_dir": True})

    preview = run_sync(settings=creating, dry_run=True)
    assert preview[0].missing == ["tt1"]
    assert not creating.metas_dir.exists()

    client, _ = _client(fake_session, fake_response, meta_url, {"tt1": '{"meta": 1}'})
    run_sync(settings=creating, client=client, sleep=sleep_recorder)
    assert (creating.metas_dir / "tt1.json").read_text(encoding="utf-8") == "1"


def test_missing_data_dir_is_fatal(settings, tmp_path):
    with pytest.raises(DataDirError):
        run_sync(settings=settings.merge_overrides({"data_dir": tmp_path / "nope"}), dry_run=True)


def test_csv_without_id_column_is_fatal(settings, data_dir, csv_writer):
    csv_writer(data_dir / "list.csv", [["Title"], ["A"]])

    with pytest.raises(MissingIdColumnError):
        run_sync(settings=settings, dry_run=True)


def test_write_failure_is_fatal(settings, data_dir, csv_writer, fake_session, fake_response, meta_url, sleep_recorder, monkeypatch):
    csv_writer(data_dir / "list.csv", [["IMDb ID"], ["tt1"]])
    client, _ = _client(fake_session, fake_response, meta_url, {"tt1": '{"meta": 1}'})

    def failing_write(*args, **kwargs):
        raise MetaWriteError("disk full")

    monkeypatch.setattr(orchestrator.metas_store, "write_metas", failing_write)

    with pytest.raises(MetaWriteError, match="disk full"):
        run_sync(settings=settings, client=client, sleep=sleep_recorder)


def test_run_sync_owns_and_closes_default_client(settings, data_dir, csv_writer, monkeypatch, sleep_recorder):
    csv_writer(data_dir / "list.csv", [["IMDb ID"], ["tt1"]])
    created = []

    class _Client:
        def __init__(self):
            self.closed = False

        def fetch(self, identifier):
            return FetchOutcome.skipped(identifier, SkipReason.NETWORK_ERROR, "offline")

        def close(self):
            self.closed = True

    def fake_from_settings(cls, resolved):
        client = _Client()
        created.append(client)
        return client

    monkeypatch.setattr(orchestrator.CinemetaClient, "from_settings", classmethod(fake_from_settings))

    run_sync(settings=settings, sleep=sleep_recorder)

    assert len(created) == 1
    assert created[0].closed is True


def test_run_sync_without_csv_files(settings):
    assert run_sync(settings=settings) == []


def test_sync_csv_advances_progress_bar_per_lookup(settings, data_dir, csv_writer, fake_session, fake_response, meta_url, sleep_recorder, monkeypatch):
    csv_path = csv_writer(data_dir / "list.csv", [["IMDb ID"], ["tt1"], ["tt2"]])
    client, _ = _client(fake_session, fake_response, meta_url, {"tt1": '{"meta": 1}'})
    bars = []

    class _Bar:
        def __init__(self):
            self.steps = []
            self.closed = False

        def update(self, step):
            self.steps.append(step)

        def close(self):
            self.closed = True

    def fake_create_progress_bar(enabled, total, desc, *, unit="item"):
        bar = _Bar()
        bars.append((enabled, total, desc, bar))
        return bar

    monkeypatch.setattr(orchestrator, "create_progress_bar", fake_create_progress_bar)

    sync_csv(csv_path, settings.merge_overrides({"show_progress": True}), client=client, sleep=sleep_recorder)

    assert len(bars) == 1
    enabled, total, desc, bar = bars[0]
    assert (enabled, total, desc) == (True, 2, "Fetching list.csv")
    assert bar.steps == [1, 1]
    assert bar.closed is True
