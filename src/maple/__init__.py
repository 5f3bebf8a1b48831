"""Maple: persistence orchestration for playlists, media players and audio devices."""
