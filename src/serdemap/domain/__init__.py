"""Domain layer: key strategies and the ordered container.

This layer depends only on the stdlib. Serialization integrations are
imported lazily from the container so the domain never requires them.
"""
