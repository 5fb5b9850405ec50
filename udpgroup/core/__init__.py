"""udpgroup core — address keys, pathway registry, routing and send resolution.

Everything here is owned by exactly one ``UdpGroup``: the registry is
passed by reference to the router and the resolver, never shared between
groups.
"""
