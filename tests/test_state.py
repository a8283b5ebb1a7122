# tests/test_state.py
import threading

from modules.talent_jobs.lib.state import CrawlState


def test_try_schedule_dedupes_and_respects_quota():
    state = CrawlState(max_items=2)
    assert state.try_schedule("https://x/1")
    assert not state.try_schedule("https://x/1")
    assert state.try_schedule("https://x/2")
    assert not state.try_schedule("https://x/3")
    assert not state.try_schedule("")
    assert state.scheduled == 2
    assert not state.can_schedule_more(follow_details=True)
    assert state.can_schedule_more(follow_details=False)


def test_claim_emit_hands_out_sequence_until_full():
    state = CrawlState(max_items=3)
    assert [state.claim_emit() for _ in range(5)] == [1, 2, 3, None, None]
    assert state.emitted == 3
    assert state.emit_quota_met()


def test_first_sighting():
    state = CrawlState(max_items=5)
    assert state.first_sighting("https://x/1")
    assert not state.first_sighting("https://x/1")


def test_emit_never_exceeds_quota_under_threads():
    state = CrawlState(max_items=50)
    claimed = []

    def worker():
        for _ in range(40):
            seq = state.claim_emit()
            if seq is not None:
                claimed.append(seq)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(claimed) == list(range(1, 51))
    assert state.snapshot()["emitted"] == 50


def test_independent_states_do_not_share_sets():
    a, b = CrawlState(max_items=1), CrawlState(max_items=1)
    assert a.try_schedule("https://x/1")
    assert b.try_schedule("https://x/1")
