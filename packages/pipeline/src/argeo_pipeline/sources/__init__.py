"""
argeo_pipeline.sources — data source adapters.

  DatosGobArSource — datos.gob.ar "unidades territoriales" CSVs
                     (local read + download)
"""

from argeo_pipeline.sources.datosgobar import DatosGobArSource

__all__ = ["DatosGobArSource"]
