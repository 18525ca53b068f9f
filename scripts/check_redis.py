#!/usr/bin/env python3
import sys, json, redis

# Usage: python scripts/check_redis.py <REDIS_URL> <DEVICE_ID>
# Shows the device's session slot and open perk window, if any

if len(sys.argv) < 3:
    print("Usage: check_redis.py <REDIS_URL> <DEVICE_ID>")
    sys.exit(1)

url = sys.argv[1].strip()
device_id = sys.argv[2].strip()

r = redis.from_url(url, decode_responses=True)

sess = r.get(f"sess:{device_id}")
perk = r.get(f"perk:{device_id}")
window = json.loads(perk) if perk else None
proof_live = bool(window and window.get('proof')) and r.exists(f"proof:{window['partner_id']}:{window['proof']}") == 1

print(json.dumps({
    'redis': url,
    'session': json.loads(sess) if sess else None,
    'session_ttl': r.ttl(f"sess:{device_id}"),
    'perk_window': window,
    'proof_live': proof_live,
}, indent=2))
