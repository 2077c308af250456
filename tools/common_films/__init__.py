"""
Common Films – find the films two Letterboxd members have in common.

Supports:
  • Harvesting a member's watched films and watchlist (paginated)
  • Merging both lists into one catalog, watched entries taking priority
  • Intersecting two catalogs by film slug
  • Backfilling missing posters with rate-limited, batched lookups
"""
