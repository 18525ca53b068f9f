import asyncio
import time

from memento.services.perks import RedemptionScreen, RedemptionTimers
from memento.services.tokens import new_proof, verify_url


def test_open_fixes_five_minute_window(clock):
    screen = RedemptionScreen(7, clock=clock)
    token = screen.open()
    assert token.expires_at == clock.now + 300
    assert token.remaining(clock.now) == 300
    assert token.payload() == {'partner_id': 7, 'proof': token.proof}


def test_rotation_does_not_extend_window(clock):
    screen = RedemptionScreen(7, clock=clock)
    first = screen.open()
    seen = {first.proof}
    for _ in range(9):
        clock.advance(30)
        screen.tick()
        seen.add(screen.token.proof)
        assert screen.token.expires_at == first.expires_at
    assert len(seen) == 10


def test_proof_changes_by_t_plus_31(clock):
    screen = RedemptionScreen(7, clock=clock)
    first = screen.open()
    clock.advance(29)
    screen.tick()
    assert screen.token.proof == first.proof
    clock.advance(2)
    screen.tick()
    assert screen.token.proof != first.proof
    assert screen.token.expires_at == first.expires_at


def test_rotation_cadence_stays_anchored(clock):
    screen = RedemptionScreen(7, clock=clock)
    start = clock.now
    screen.open()
    clock.advance(75)
    assert screen.rotate_if_due()
    assert screen.rotated_at == start + 60
    clock.advance(10)  # t=85 < next slot at 90
    assert not screen.rotate_if_due()


def test_screen_closes_at_expiry_regardless_of_proof(clock):
    closed = []
    screen = RedemptionScreen(7, clock=clock, on_close=closed.append)
    screen.open()
    clock.advance(299)
    assert screen.tick() == 1
    screen.rotate()
    clock.advance(1)
    assert screen.tick() == 0
    assert not screen.is_open
    assert screen.token is None
    assert closed == [screen]
    assert screen.rotate() is None
    assert not screen.rotate_if_due()


def test_reopen_gives_fresh_window(clock):
    screen = RedemptionScreen(7, clock=clock)
    first = screen.open()
    clock.advance(200)
    second = screen.open()
    assert second.expires_at == clock.now + 300
    assert second.issued_at == first.issued_at + 200


def test_context_manager_closes(clock):
    with RedemptionScreen(7, clock=clock) as screen:
        assert screen.is_open
    assert not screen.is_open


def test_round_trip_through_dict(clock):
    screen = RedemptionScreen(3, window=120, rotate_every=10, clock=clock)
    screen.open()
    restored = RedemptionScreen.from_dict(screen.to_dict(), clock=clock)
    assert restored.token == screen.token
    assert restored.rotate_every == 10


def test_verify_url_template():
    assert verify_url('romememories.com', 4, 'ab12cd34') == 'https://romememories.com/verify/4?salt=ab12cd34'


def test_new_proof_differs_from_previous():
    prev = new_proof()
    for _ in range(50):
        assert new_proof(prev) != prev


def test_timers_rotate_then_close():
    proofs = []

    async def scenario():
        screen = RedemptionScreen(7, window=0.3, rotate_every=0.05, clock=time.monotonic,
                                  on_rotate=lambda tok: proofs.append(tok.proof))
        token = screen.open()
        async with RedemptionTimers(screen, tick_every=0.01) as timers:
            await asyncio.wait_for(timers.wait_closed(), timeout=3)
        return screen, token

    screen, token = asyncio.run(scenario())
    assert not screen.is_open
    assert len(proofs) >= 2
    assert token.proof not in proofs


def test_timers_cancelled_on_exit():
    async def scenario():
        screen = RedemptionScreen(7, window=60, rotate_every=30, clock=time.monotonic)
        timers = RedemptionTimers(screen)
        async with timers:
            await asyncio.sleep(0.01)
        return screen, timers

    screen, timers = asyncio.run(scenario())
    assert not screen.is_open
    assert timers._countdown is None and timers._rotation is None


def test_wait_closed_starts_timers():
    async def scenario():
        screen = RedemptionScreen(7, window=0.05, clock=time.monotonic)
        timers = RedemptionTimers(screen, tick_every=0.01)
        await asyncio.wait_for(timers.wait_closed(), timeout=3)
        await timers.cancel()
        return screen

    assert not asyncio.run(scenario()).is_open
