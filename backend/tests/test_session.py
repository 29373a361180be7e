from memory_match.services.game.session import GameSession, GameState
from memory_match.services.game.storage import MemoryStorage


def assert_invariants(game):
    assert len(game.flipped) <= 2
    assert not set(game.flipped) & set(game.matched)
    assert len(game.matched) % 2 == 0
    matched = game.matched
    for a, b in zip(matched[::2], matched[1::2]):
        assert game.tiles[a].pair_id == game.tiles[b].pair_id


def test_initialize_puts_session_in_ready(session, tiny_tiles):
    assert session.state == GameState.READY
    assert session.tiles == tuple(tiny_tiles)
    assert session.flipped == ()
    assert session.matched == ()
    assert session.moves == 0
    assert session.elapsed_seconds == 0
    assert session.score is None


def test_full_two_pair_scenario(session, scheduler, leaderboard):
    assert session.start()
    scheduler.advance(3)

    session.flip(0)
    assert session.flipped == (0,)
    assert session.moves == 0

    session.flip(2)
    assert session.moves == 1
    scheduler.advance(1)
    assert session.matched == (0, 2)
    assert session.flipped == ()
    assert session.moves == 1

    session.flip(1)
    assert session.flipped == (1,)
    assert session.moves == 1

    session.flip(3)
    scheduler.advance(1)
    assert session.matched == (0, 2, 1, 3)
    assert session.moves == 2
    assert session.state == GameState.COMPLETED
    # 3s before the first flip + 1s first resolution + 1s second resolution
    assert session.elapsed_seconds == 5
    assert session.score == 10000 - 100 - 10 * 5

    [entry] = leaderboard.entries('Tiny')
    assert entry.score == session.score
    assert entry.moves == 2
    assert entry.time_seconds == 5


def test_mismatch_flips_back_and_keeps_matched(session, scheduler):
    session.start()
    session.flip(0)
    session.flip(1)
    assert session.flipped == (0, 1)
    scheduler.advance(1)
    assert session.flipped == ()
    assert session.matched == ()
    assert session.moves == 1


def test_moves_count_pair_attempts_not_single_flips(session, scheduler):
    session.start()
    session.flip(0)
    assert session.moves == 0
    session.flip(1)
    assert session.moves == 1
    scheduler.advance(1)
    session.flip(1)
    assert session.moves == 1
    session.flip(0)
    assert session.moves == 2


def test_board_locked_while_resolution_pending(session, scheduler):
    session.start()
    session.flip(0)
    session.flip(1)
    assert not session.flip(2)
    assert session.flipped == (0, 1)
    scheduler.advance(0.5)
    assert not session.flip(3)
    assert session.moves == 1
    assert_invariants(session)


def test_flip_preconditions_reject_silently(session, scheduler):
    # not playing yet
    assert not session.flip(0)
    assert session.flipped == ()

    session.start()
    assert not session.flip(-1)
    assert not session.flip(4)
    assert session.flip(0)
    assert not session.flip(0)
    assert session.flipped == (0,)

    session.flip(2)
    scheduler.advance(1)
    before = session.snapshot()
    assert not session.flip(0)
    assert not session.flip(2)
    assert session.snapshot() == before


def test_flip_while_paused_is_ignored(session):
    session.start()
    session.pause()
    assert not session.flip(0)
    assert session.flipped == ()


def test_invalid_transitions_are_ignored(session):
    assert not session.pause()
    assert not session.resume()
    assert session.start()
    assert not session.start()
    assert not session.resume()
    assert session.pause()
    assert not session.pause()
    assert not session.start()
    assert session.state == GameState.PAUSED


def test_mutators_before_initialize_are_noops(scheduler):
    game = GameSession(scheduler)
    assert not game.start()
    assert not game.flip(0)
    assert not game.pause()
    assert not game.resume()
    assert game.reset()
    assert game.state == GameState.READY
    assert game.tiles == ()


def test_pause_excludes_paused_duration(session, scheduler):
    session.start()
    scheduler.advance(7.5)
    assert session.elapsed_seconds == 7
    session.pause()
    assert session.elapsed_seconds == 7

    scheduler.advance(600)
    assert session.elapsed_seconds == 7
    session.resume()
    assert session.elapsed_seconds == 7

    scheduler.advance(3)
    assert session.elapsed_seconds == 10


def test_tick_refreshes_elapsed_once_per_second(session, scheduler):
    session.start()
    for expected in range(1, 5):
        scheduler.advance(1)
        assert session.elapsed_seconds == expected


def test_only_one_tick_pending_after_pause_resume_cycles(session, scheduler):
    session.start()
    for _ in range(5):
        session.pause()
        session.resume()
    assert scheduler.pending == 1


def test_reset_keeps_board_and_clears_progress(session, scheduler, tiny_tiles):
    session.start()
    session.flip(0)
    session.flip(2)
    scheduler.advance(2)
    session.reset()
    assert session.state == GameState.READY
    assert session.tiles == tuple(tiny_tiles)
    assert session.matched == ()
    assert session.moves == 0
    assert session.elapsed_seconds == 0
    assert scheduler.pending == 0


def test_reset_mid_resolution_ignores_stale_callback(session, scheduler):
    session.start()
    session.flip(0)
    session.flip(2)
    session.reset()
    session.start()
    session.flip(0)

    scheduler.advance(1)

    assert session.flipped == (0,)
    assert session.matched == ()
    assert session.moves == 0
    assert_invariants(session)


def test_reinitialize_mid_resolution_ignores_stale_callback(session, scheduler, tiny_tiles, tiny_level):
    session.start()
    session.flip(0)
    session.flip(2)
    scheduler.advance(0.5)
    session.initialize(list(reversed(tiny_tiles)), tiny_level)
    session.start()
    session.flip(0)
    session.flip(2)
    # the stale resolution fires first and must leave the fresh pair alone
    scheduler.advance(0.5)
    assert session.flipped == (0, 2)
    assert session.matched == ()
    scheduler.advance(0.5)
    assert session.flipped == ()
    assert session.matched == (0, 2)


def test_completed_is_terminal(session, scheduler):
    session.start()
    for a, b in ((0, 2), (1, 3)):
        session.flip(a)
        session.flip(b)
        scheduler.advance(1)
    assert session.state == GameState.COMPLETED
    assert not session.start()
    assert not session.pause()
    assert not session.resume()
    assert not session.flip(0)
    score = session.score
    scheduler.advance(30)
    assert session.score == score
    assert session.state == GameState.COMPLETED


def test_resolution_while_paused_can_complete(session, scheduler):
    session.start()
    session.flip(0)
    session.flip(2)
    scheduler.advance(1)
    scheduler.advance(0.5)
    session.flip(1)
    session.flip(3)
    session.pause()
    scheduler.advance(20)
    assert session.state == GameState.COMPLETED
    # frozen at pause time, the paused 20s are not counted
    assert session.elapsed_seconds == 1
    assert session.score == 10000 - 100 - 10


def test_completion_survives_storage_failure(scheduler, tiny_tiles, tiny_level):
    from memory_match.services.game.leaderboard import Leaderboard

    class BrokenStorage(MemoryStorage):
        def save(self, key, value):
            raise OSError('disk full')

    game = GameSession(scheduler, leaderboard=Leaderboard(BrokenStorage()))
    game.initialize(tiny_tiles, tiny_level)
    game.start()
    for a, b in ((0, 2), (1, 3)):
        game.flip(a)
        game.flip(b)
        scheduler.advance(1)
    assert game.state == GameState.COMPLETED
    assert game.score == 10000 - 100 - 20


def test_listeners_receive_snapshots(session, scheduler):
    seen = []
    unsubscribe = session.subscribe(lambda snap: seen.append(snap.state))
    session.start()
    session.pause()
    unsubscribe()
    session.resume()
    assert seen == [GameState.PLAYING, GameState.PAUSED]


def test_failing_listener_does_not_break_session(session):
    calls = []

    def broken(_snap):
        raise RuntimeError('boom')

    session.subscribe(broken)
    session.subscribe(lambda snap: calls.append(snap.moves))
    assert session.start()
    assert session.state == GameState.PLAYING
    assert calls == [0]


def test_invariants_hold_through_random_play(scheduler, leaderboard):
    import random
    from memory_match.services.game.board import generate_board
    from memory_match.services.game.levels import Level

    rng = random.Random(1234)
    level = Level(name='Random', grid_size=4, pair_count=8)
    game = GameSession(scheduler, leaderboard=leaderboard)
    game.initialize(generate_board(level.pair_count, rng), level)
    game.start()
    for _ in range(400):
        op = rng.random()
        if op < 0.7:
            game.flip(rng.randrange(-1, 17))
        elif op < 0.8:
            game.pause()
        elif op < 0.9:
            game.resume()
        else:
            scheduler.advance(rng.choice([0.3, 1.0, 2.0]))
        assert_invariants(game)
    assert game.elapsed_seconds >= 0


def test_snapshot_reports_progress_and_live_score(session, scheduler):
    session.start()
    session.flip(0)
    session.flip(2)
    scheduler.advance(1)
    snap = session.snapshot()
    assert snap.matched_pairs == 1
    assert snap.total_pairs == 2
    assert snap.progress == 50.0
    assert snap.live_score == 10000 - 50 - 10
    data = snap.to_dict()
    assert data['state'] == 'playing'
    assert data['level']['name'] == 'Tiny'
    assert data['score'] is None


def test_completion_survives_corrupt_stored_scores(session, scheduler, storage):
    storage.save_raw('highScores_Tiny', '[{"score": 1e400, "moves": 1, "time_seconds": 1,'
                                        ' "recorded_at": "2024-01-01T00:00:00+00:00"}]')
    seen = []
    session.subscribe(lambda snap: seen.append(snap.state))
    session.start()
    for a, b in ((0, 2), (1, 3)):
        session.flip(a)
        session.flip(b)
        scheduler.advance(1)
    assert session.state == GameState.COMPLETED
    assert session.score == 10000 - 100 - 20
    assert seen[-1] == GameState.COMPLETED
    assert [entry['score'] for entry in storage.load('highScores_Tiny')] == [session.score]


def test_listeners_run_while_session_is_locked(session, scheduler):
    import threading

    held = []

    def check(_snap):
        result = []

        def try_lock():
            acquired = session._lock.acquire(blocking=False)
            if acquired:
                session._lock.release()
            result.append(acquired)

        worker = threading.Thread(target=try_lock)
        worker.start()
        worker.join()
        held.append(not result[0])

    session.subscribe(check)
    session.start()
    session.flip(0)
    session.flip(1)
    scheduler.advance(1)
    session.pause()
    # start, two flips, the display tick, the resolution and pause
    assert held == [True] * 6


def test_listeners_see_snapshots_in_mutation_order(session, scheduler):
    seen = []
    session.subscribe(lambda snap: seen.append((snap.state, snap.flipped, snap.moves)))
    session.start()
    session.flip(0)
    session.flip(1)
    scheduler.advance(1)
    assert seen == [
        (GameState.PLAYING, (), 0),
        (GameState.PLAYING, (0,), 0),
        (GameState.PLAYING, (0, 1), 1),
        (GameState.PLAYING, (0, 1), 1),
        (GameState.PLAYING, (), 1),
    ]
