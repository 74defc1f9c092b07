"""Reference catalogs — loading, front-matter parsing and cascade merge.

Layout (both levels share it):
    ~/.claude/                         # user level
    └── references/
        ├── index.json                 # optional precomputed catalog
        ├── README.md                  # ignored
        └── supabase.md                # front-matter: name, triggers, ...
    <project>/.claude/references/      # project level, same shape
"""
