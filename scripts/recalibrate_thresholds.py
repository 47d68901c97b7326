#!/usr/bin/env python3
"""
Scheduled threshold recalibration.
Prints the thresholds the case memory currently supports; with --apply the
new snapshot replaces the current one and is written to the thresholds file.
Running servers pick up the rewritten file on their next request.
"""
import os
import sys
import json
import argparse

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from lexibridge.app import create_app
from lexibridge.config import AppConfig


def main():
    parser = argparse.ArgumentParser(description='Recalibrate merge thresholds from human decisions')
    parser.add_argument('--apply', action='store_true',
                        help='Apply and save the recalibrated thresholds')
    parser.add_argument('--sample-size', type=int, default=None,
                        help='Number of most recent cases to use')
    args = parser.parse_args()

    config = AppConfig.load()
    if not config.database_url:
        print("DATABASE_URL not configured")
        sys.exit(1)

    app = create_app(config=config)
    orchestrator = app.extensions['lexibridge']

    with app.app_context():
        current = orchestrator.registry.current()
        proposed = orchestrator.recalibrate_thresholds(apply=args.apply, sample_size=args.sample_size)

    print("Current thresholds:")
    print(json.dumps(current.to_dict(), indent=2))
    print("Recalibrated thresholds:")
    print(json.dumps(proposed.to_dict(), indent=2))

    if args.apply:
        if orchestrator.registry.save():
            print(f"Applied version {proposed.version} and saved to {orchestrator.registry.path}")
        else:
            print(f"Applied version {proposed.version} (not saved)")


if __name__ == '__main__':
    main()
