#!/usr/bin/env python3
"""
Compute and cache keyword sets for dictionary entries that have none.
Entries proposed through the API get their cache filled lazily; this fills
the rest in one pass so candidate scoring never re-extracts.
"""
import os
import sys
import argparse

from tqdm import tqdm

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from lexibridge.app import create_app
from lexibridge.config import AppConfig
from lexibridge.keyword_extractor import KeywordExtractor
from lexibridge.models import DictionaryEntryModel
from lexibridge.sql_store import SQLStore, entry_from_row


def backfill(store, extractor, language=None, dry_run=False, verbose=True):
    """Fill the keyword cache of every entry missing one; returns (updated, empty)"""
    query = DictionaryEntryModel.query.filter(DictionaryEntryModel.keywords_json.is_(None))
    if language:
        query = query.filter(DictionaryEntryModel.language == language)
    rows = query.all()

    if verbose:
        print(f"{len(rows)} entries without cached keywords")

    updated = 0
    empty = 0
    for row in tqdm(rows, desc="Extracting keywords", disable=not verbose):
        entry = entry_from_row(row)
        keywords = extractor.extract(entry)
        if not keywords:
            empty += 1
            continue
        if not dry_run:
            store.update_entry(entry.id, keywords=keywords)
        updated += 1

    return updated, empty


def main():
    parser = argparse.ArgumentParser(description='Backfill cached keyword sets for dictionary entries')
    parser.add_argument('--language', '-l', default=None,
                        help='Only process entries in this language')
    parser.add_argument('--dry-run', action='store_true',
                        help='Extract keywords without writing them')
    parser.add_argument('--quiet', '-q', action='store_true', help='Suppress output')
    args = parser.parse_args()

    config = AppConfig.load()
    if not config.database_url:
        print("DATABASE_URL not configured")
        sys.exit(1)

    app = create_app(config=config)
    extractor = KeywordExtractor(config.keywords)
    with app.app_context():
        updated, empty = backfill(SQLStore(), extractor, language=args.language,
                                  dry_run=args.dry_run, verbose=not args.quiet)

    if not args.quiet:
        action = 'Would update' if args.dry_run else 'Updated'
        print(f"{action} {updated} entries ({empty} yielded no keywords)")


if __name__ == '__main__':
    main()
