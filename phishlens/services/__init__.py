"""Engine services: dispatcher, aggregation, indicators, narrative, statistics.

Import concrete services from their modules; this package stays import-light
because the schema layer depends on ``phishlens.services.interfaces``.
"""
