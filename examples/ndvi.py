"""NDVI of a Landsat 8 scene, clipped to a field and shown with a false-color composite.

Build the graph with the CLI, which installs the registry first:

    rasterexpr encode examples/ndvi.py --var ndvi --registry examples/algorithms.json
"""

import rasterexpr as rx

scene = rx.Image("LANDSAT/LC08/C02/T1_TOA/LC08_044034_20140318")

field = {
    "type": "Polygon",
    "coordinates": [[[-122.09, 37.42], [-122.08, 37.42], [-122.08, 37.43], [-122.09, 37.43], [-122.09, 37.42]]],
}

ndvi = scene.expression(
    "(nir - red) / (nir + red)",
    {"nir": scene.select("B5"), "red": scene.select("B4")},
).clip(field)

false_color = rx.Image.rgb(scene.select("B5"), scene.select("B4"), scene.select("B3"))
