import time

import pytest

from memento.services import cache, redeem


def test_partner_check_does_not_touch_holder_window(app):
    with app.app_context():
        t0 = time.time()
        screen = redeem.open_window('dev-1', 1, now=t0)
        first = screen.token.proof
        assert redeem.verify_proof(1, first, now=t0 + 5)
        assert not redeem.verify_proof(2, first, now=t0 + 5)

        # past the rotation slot, but nobody has polled the window yet
        assert redeem.verify_proof(1, first, now=t0 + 32)
        assert redeem._load('dev-1').token.proof == first


def test_rotated_proof_verifies_only_within_grace(app, monkeypatch):
    with app.app_context():
        t0 = time.time()
        first = redeem.open_window('dev-1', 1, now=t0).token.proof
        later = redeem.current_window('dev-1', now=t0 + 31)
        assert later.token.proof != first
        assert later.token.expires_at == pytest.approx(t0 + 300)
        assert redeem.verify_proof(1, first, now=t0 + 33)
        assert redeem.verify_proof(1, later.token.proof, now=t0 + 33)

        real = time.time()
        monkeypatch.setattr(cache.time, 'time', lambda: real + redeem.PROOF_GRACE_SEC + 1)
        assert not redeem.verify_proof(1, first, now=t0 + 37)
        assert redeem.verify_proof(1, later.token.proof, now=t0 + 37)


def test_window_expires_after_five_minutes(app):
    with app.app_context():
        t0 = time.time()
        screen = redeem.open_window('dev-1', 1, now=t0)
        proof = screen.token.proof
        assert redeem.current_window('dev-1', now=t0 + 299) is not None
        assert not redeem.verify_proof(1, redeem._load('dev-1').token.proof, now=t0 + 300)
        assert redeem.current_window('dev-1', now=t0 + 300) is None
        assert not redeem.verify_proof(1, proof, now=t0 + 300)
        assert redeem.current_window('dev-1', now=t0 + 301) is None


def test_reopen_replaces_previous_window(app):
    with app.app_context():
        t0 = time.time()
        first = redeem.open_window('dev-1', 1, now=t0).token
        second = redeem.open_window('dev-1', 1, now=t0 + 100).token
        assert second.expires_at == pytest.approx(t0 + 400)
        assert not redeem.verify_proof(1, first.proof, now=t0 + 100)
        assert redeem.close_window('dev-1')
        assert not redeem.close_window('dev-1')
