"""Perk redemption windows: fixed expiry, rotating proof."""
import asyncio
import logging
import math
import time
from dataclasses import dataclass, replace
from typing import Callable, Optional

from .tokens import new_proof, verify_url

log = logging.getLogger(__name__)

WINDOW_SEC = 300
ROTATE_SEC = 30


@dataclass(frozen=True)
class RedemptionToken:
    partner_id: int
    proof: str
    issued_at: float
    expires_at: float

    def remaining(self, now: float) -> int:
        return max(0, math.ceil(self.expires_at - now))

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at

    def verify_url(self, host: str) -> str:
        return verify_url(host, self.partner_id, self.proof)

    def payload(self) -> dict:
        return {'partner_id': self.partner_id, 'proof': self.proof}


class RedemptionScreen:
    def __init__(self, partner_id: int, window: float = WINDOW_SEC, rotate_every: float = ROTATE_SEC,
                 clock: Callable[[], float] = time.time,
                 on_rotate: Optional[Callable[[RedemptionToken], None]] = None,
                 on_close: Optional[Callable[['RedemptionScreen'], None]] = None):
        self.partner_id = partner_id
        self.window = window
        self.rotate_every = rotate_every
        self.clock = clock
        self.on_rotate = on_rotate
        self.on_close = on_close
        self.token: Optional[RedemptionToken] = None
        self.rotated_at: Optional[float] = None

    @property
    def is_open(self) -> bool:
        return self.token is not None

    def _now(self, now):
        return self.clock() if now is None else now

    def open(self, now: Optional[float] = None) -> RedemptionToken:
        """Start a fresh window; reopening discards the previous token."""
        now = self._now(now)
        self.token = RedemptionToken(self.partner_id, new_proof(), now, now + self.window)
        self.rotated_at = now
        return self.token

    def countdown(self, now: Optional[float] = None) -> int:
        """Whole seconds left; closes the screen when none are."""
        if self.token is None:
            return 0
        left = self.token.remaining(self._now(now))
        if left <= 0:
            self.close()
        return left

    def rotate(self, now: Optional[float] = None) -> Optional[RedemptionToken]:
        if self.token is None:
            return None
        self.token = replace(self.token, proof=new_proof(self.token.proof))
        self.rotated_at = self._now(now)
        if self.on_rotate is not None:
            self.on_rotate(self.token)
        return self.token

    def rotate_if_due(self, now: Optional[float] = None) -> bool:
        now = self._now(now)
        if self.token is None or not self.token.is_valid(now):
            return False
        elapsed = now - self.rotated_at
        if elapsed < self.rotate_every:
            return False
        # Keep the cadence anchored to the opening time.
        anchor = self.rotated_at + (elapsed // self.rotate_every) * self.rotate_every
        self.rotate(now)
        self.rotated_at = anchor
        return True

    def tick(self, now: Optional[float] = None) -> int:
        now = self._now(now)
        left = self.countdown(now)
        if left > 0:
            self.rotate_if_due(now)
        return left

    def close(self) -> None:
        if self.token is None:
            return
        self.token = None
        log.debug('perk screen for partner %s closed', self.partner_id)
        if self.on_close is not None:
            self.on_close(self)

    def __enter__(self):
        if self.token is None:
            self.open()
        return self

    def __exit__(self, *exc):
        self.close()

    def to_dict(self) -> dict:
        tok = self.token
        return {
            'partner_id': self.partner_id,
            'proof': tok.proof if tok else None,
            'issued_at': tok.issued_at if tok else None,
            'expires_at': tok.expires_at if tok else None,
            'rotated_at': self.rotated_at,
            'window': self.window,
            'rotate_every': self.rotate_every,
        }

    @classmethod
    def from_dict(cls, data: dict, clock: Callable[[], float] = time.time) -> 'RedemptionScreen':
        screen = cls(data['partner_id'], window=data['window'], rotate_every=data['rotate_every'], clock=clock)
        if data.get('proof'):
            screen.token = RedemptionToken(data['partner_id'], data['proof'], data['issued_at'], data['expires_at'])
            screen.rotated_at = data['rotated_at']
        return screen


class RedemptionTimers:
    """Countdown and rotation timers bound to one screen.

    Both tasks are cancelled on exit of ``async with``; the countdown task
    also stops the rotation task as soon as the screen closes.
    """

    def __init__(self, screen: RedemptionScreen, tick_every: float = 1.0, rotate_every: Optional[float] = None):
        self.screen = screen
        self.tick_every = tick_every
        self.rotate_every = rotate_every or screen.rotate_every
        self._countdown = None
        self._rotation = None

    def start(self):
        if self._countdown is not None:
            return
        if not self.screen.is_open:
            self.screen.open()
        self._countdown = asyncio.create_task(self._run_countdown())
        self._rotation = asyncio.create_task(self._run_rotation())

    async def _run_countdown(self):
        while self.screen.is_open:
            await asyncio.sleep(self.tick_every)
            self.screen.countdown()
        self._rotation.cancel()

    async def _run_rotation(self):
        while self.screen.is_open:
            await asyncio.sleep(self.rotate_every)
            if self.screen.is_open:
                self.screen.rotate()

    async def wait_closed(self):
        if self._countdown is None:
            self.start()
        await asyncio.shield(self._countdown)

    async def cancel(self):
        tasks = [t for t in (self._countdown, self._rotation) if t is not None]
        for t in tasks:
            t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._countdown = self._rotation = None
        self.screen.close()

    async def __aenter__(self):
        self.start()
        return self

    async def __aexit__(self, *exc):
        await self.cancel()
