"""ftlconf - typed Pi-hole FTL configuration registry.

Reads and writes the structured pihole-FTL.toml document and imports the
flat legacy pihole-FTL.conf document.
"""

__version__ = "0.1.0"
