"""Location adapters - Implementations of LocationProviderPort.

Available implementations:
- IPGeolocationProvider: Coarse position from an IP geolocation service
- SimulatedLocationProvider: Scripted permission outcome and readings
"""

from .ip_provider import IPGeolocationProvider
from .simulated import SimulatedLocationProvider

__all__ = ["IPGeolocationProvider", "SimulatedLocationProvider"]
