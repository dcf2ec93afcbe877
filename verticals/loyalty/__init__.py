"""Loyalty vertical — bonus points for cart and order lifecycle events.

Pieces, each in its own module:
- Rate table lookup (cart total → points)
- Points reconciliation (award + stored balance)
- Update-action synthesis (award line item, points custom field)
- Repository over the platform's GraphQL API
- Controllers and FastAPI router for the API Extension calls
"""
