"""Services Layer — async shell around the pure core.

Invariants:
    - Store classes implement core/repository_protocols.py over an AsyncSession
    - Services receive their stores through the constructor, typed by the protocols;
      they never construct a Sql*Store themselves (bootstrap is the one startup exception)
    - Services convert core failures/denials into StorefrontError exactly once
    - Services own commit boundaries; stores only flush

Design Decisions:
    - One service per resource family for locality (accounts, catalog, cart)
"""
