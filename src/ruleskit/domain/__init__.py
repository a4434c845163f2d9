"""Pure domain layer — models, frontmatter codec, substitution, merging.

Nothing in this package touches the filesystem.
"""
