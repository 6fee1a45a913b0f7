"""
Game services.

Workflow:
1. Load the place catalog (places.json) once at startup.
2. Pick the next place, weighted by difficulty and skipping places already shown.
3. Find the nearest street-level panorama, widening the search radius.
4. Score the player's free-text guess with loose matching.
"""
