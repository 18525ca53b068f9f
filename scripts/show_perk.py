#!/usr/bin/env python3
import os, sys, asyncio, argparse, pathlib
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from memento.services.perks import RedemptionScreen, RedemptionTimers
from memento.services.qr import qr_ascii

# Kiosk-style perk display: shows the verification QR, redraws it on every
# proof rotation and exits when the five-minute window closes.


def parse_args():
    p = argparse.ArgumentParser(description='Show a rotating perk verification code in the terminal')
    p.add_argument('partner_id', type=int)
    p.add_argument('--host', default=os.environ.get('VERIFY_HOST', 'localhost:5000'))
    p.add_argument('--window', type=int, default=int(os.environ.get('PERK_WINDOW_SEC', '300')))
    p.add_argument('--rotate', type=int, default=int(os.environ.get('PROOF_ROTATE_SEC', '30')))
    p.add_argument('--tick', type=float, default=float(os.environ.get('COUNTDOWN_TICK_SEC', '1')))
    return p.parse_args()


async def run(args):
    def show(token):
        url = token.verify_url(args.host)
        print(qr_ascii(url))
        print(url)

    screen = RedemptionScreen(args.partner_id, window=args.window, rotate_every=args.rotate, on_rotate=show)
    show(screen.open())
    async with RedemptionTimers(screen, tick_every=args.tick) as timers:
        await timers.wait_closed()
    print('⏱  Perk expired.')


if __name__ == '__main__':
    try:
        asyncio.run(run(parse_args()))
    except KeyboardInterrupt:
        print('closed')
