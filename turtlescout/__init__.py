"""Turtle scout collaboration client.

Keeps a Turtle hunt train (a shared, collaboratively edited list of hunt mob
sightings) in sync with the trains recorded in game: joins and leaves collab
sessions, pushes sighting updates and generates new shareable train links.
Reference data comes from the `huntdata` package.
"""
