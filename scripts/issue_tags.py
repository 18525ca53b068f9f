#!/usr/bin/env python3
import os, sys, csv, base64
import argparse
import pathlib
import requests

# Batch-provision pending tags by calling /admin/issue-tag
# Outputs: one QR PNG per tag (to write on the NFC souvenir) and a CSV


def parse_args():
    p = argparse.ArgumentParser(description='Batch provision souvenir tags using the admin API')
    p.add_argument('--base-url', default=os.environ.get('BASE_URL','http://localhost:5000'), help='Service base URL')
    p.add_argument('--admin-key', default=os.environ.get('ADMIN_API_KEY'), help='X-Admin-Key (env ADMIN_API_KEY)')
    p.add_argument('--tier', default=os.environ.get('TAG_TIER','standard'), choices=['standard','gold','premium'])
    p.add_argument('--count', type=int, default=int(os.environ.get('COUNT','10')), help='number of tags to issue')
    p.add_argument('--batch', default=os.environ.get('BATCH_ID') or 'batch', help='batch id/prefix for output folder')
    p.add_argument('--out', default='out', help='output directory root (default: out)')
    return p.parse_args()


def issue_one(base_url: str, key: str, tier: str):
    url = f"{base_url.rstrip('/')}/admin/issue-tag"
    headers = {
        'X-Admin-Key': key,
        'Accept': 'application/json',
        'Content-Type': 'application/json',
    }
    r = requests.post(url, headers=headers, json={'tier': tier}, timeout=30)
    if r.status_code != 200:
        raise RuntimeError(f"issue-tag failed {r.status_code}: {r.text[:200]}")
    data = r.json()
    return data['tag_id'], data['scan_url'], base64.b64decode(data['qr_png_b64'])


def main():
    args = parse_args()
    if not args.admin_key:
        print('ERROR: missing --admin-key or env ADMIN_API_KEY', file=sys.stderr)
        sys.exit(1)
    out_root = pathlib.Path(args.out) / f"{args.batch}"
    png_dir = out_root / 'png'
    png_dir.mkdir(parents=True, exist_ok=True)

    rows = []
    print(f"→ Issuing {args.count} {args.tier} tags on {args.base_url}…")
    for i in range(args.count):
        try:
            tag_id, scan_url, png_bytes = issue_one(args.base_url, args.admin_key, args.tier)
        except (requests.RequestException, RuntimeError) as e:
            print(f"[{i+1}/{args.count}] ERROR: {e}", file=sys.stderr)
            sys.exit(2)
        png_path = png_dir / f"tag_{tag_id}.png"
        png_path.write_bytes(png_bytes)
        rows.append({'tag_id': tag_id, 'tier': args.tier, 'scan_url': scan_url, 'png': str(png_path.relative_to(out_root))})
        print(f"[{i+1}/{args.count}] tag {tag_id}")

    csv_path = out_root / 'tags.csv'
    with open(csv_path, 'w', newline='') as f:
        w = csv.DictWriter(f, fieldnames=['tag_id','tier','scan_url','png'])
        w.writeheader()
        w.writerows(rows)

    print(f"✅ Done. CSV: {csv_path}\nPNG dir: {png_dir}")


if __name__ == '__main__':
    main()
