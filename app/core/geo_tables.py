"""Static geographic reference data for distance estimation.

All tables are read-only mappings built once at import. Coordinates are
(latitude, longitude) centroids; distances are verified road miles.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

EARTH_RADIUS_MILES = 3958.8
CENTRAL_UK = (52.486243, -1.890401)
MIN_DISTANCE_MILES = 0.5

UK_CITIES = (
    "London", "Manchester", "Birmingham", "Leeds", "Glasgow", "Sheffield",
    "Edinburgh", "Liverpool", "Bristol", "Newcastle", "Cardiff", "Belfast",
    "Nottingham", "Southampton", "Brighton", "Oxford", "Cambridge", "York",
    "Leicester", "Aberdeen", "Coventry", "Northampton",
)

_CITY_DISTANCE_ROWS = {
    "London": {
        "Manchester": 200, "Birmingham": 126, "Leeds": 195, "Glasgow": 403,
        "Sheffield": 167, "Edinburgh": 414, "Liverpool": 213, "Bristol": 118,
        "Newcastle": 283, "Cardiff": 150, "Belfast": 518, "Nottingham": 129,
        "Southampton": 79, "Brighton": 54, "Oxford": 56, "Cambridge": 64,
        "York": 208, "Leicester": 102, "Aberdeen": 545, "Coventry": 95,
        "Northampton": 68,
    },
    "Manchester": {
        "Birmingham": 86, "Leeds": 43, "Glasgow": 213, "Sheffield": 38,
        "Edinburgh": 219, "Liverpool": 34, "Bristol": 167, "Newcastle": 141,
        "Cardiff": 175, "Belfast": 168, "Nottingham": 70, "Southampton": 216,
        "Brighton": 254, "Oxford": 146, "Cambridge": 140, "York": 67,
        "Leicester": 89, "Aberdeen": 351, "Coventry": 99, "Northampton": 107,
    },
    "Birmingham": {
        "Leeds": 116, "Glasgow": 290, "Sheffield": 75, "Edinburgh": 292,
        "Liverpool": 99, "Bristol": 87, "Newcastle": 196, "Cardiff": 104,
        "Belfast": 259, "Nottingham": 51, "Southampton": 137, "Brighton": 161,
        "Oxford": 63, "Cambridge": 97, "York": 132, "Leicester": 42,
        "Aberdeen": 426, "Coventry": 20, "Northampton": 45,
    },
    "Northampton": {
        "Leeds": 115, "Glasgow": 300, "Sheffield": 94, "Edinburgh": 320,
        "Liverpool": 132, "Bristol": 103, "Newcastle": 211, "Cardiff": 131,
        "Belfast": 373, "Nottingham": 60, "Southampton": 122, "Brighton": 130,
        "Oxford": 45, "Cambridge": 50, "York": 139, "Leicester": 30,
        "Aberdeen": 450, "Coventry": 35,
    },
    "Brighton": {
        "Leeds": 245, "Glasgow": 457, "Sheffield": 217, "Edinburgh": 468,
        "Liverpool": 268, "Bristol": 139, "Newcastle": 333, "Cardiff": 171,
        "Belfast": 568, "Nottingham": 180, "Southampton": 64, "Oxford": 97,
        "Cambridge": 118, "York": 258, "Leicester": 153, "Aberdeen": 599,
        "Coventry": 146,
    },
}


def _symmetric(rows: dict) -> Mapping:
    table = {}
    for origin, destinations in rows.items():
        for destination, miles in destinations.items():
            table[frozenset((origin.lower(), destination.lower()))] = float(miles)
    return MappingProxyType(table)


CITY_DISTANCES = _symmetric(_CITY_DISTANCE_ROWS)

POSTCODE_CENTROIDS = MappingProxyType({
    # London
    "E": (51.52, -0.05), "E1": (51.5175, -0.0628), "E2": (51.5295, -0.0556),
    "E3": (51.5268, -0.0247), "E4": (51.6314, -0.0006), "E5": (51.5584, -0.0526),
    "E6": (51.5141, 0.0507), "E7": (51.5458, 0.0254), "E8": (51.5426, -0.0619),
    "E9": (51.5422, -0.0452), "E10": (51.5674, -0.0121), "E11": (51.5684, 0.0099),
    "E12": (51.5507, 0.0457), "E13": (51.5268, 0.0258), "E14": (51.5056, -0.0183),
    "E15": (51.5392, 0.0056), "E16": (51.5126, 0.0212), "E17": (51.5839, -0.0208),
    "E18": (51.5913, 0.0245), "E20": (51.5469, -0.0068),
    "EC": (51.515, -0.09), "EC1": (51.5236, -0.1069), "EC2": (51.5209, -0.0895),
    "EC3": (51.5136, -0.0829), "EC4": (51.5149, -0.1006),
    "N": (51.55, -0.09), "N1": (51.5385, -0.0961),
    "NW": (51.54, -0.18), "NW1": (51.5297, -0.1424),
    "SE": (51.47, -0.06), "SE1": (51.4985, -0.0856),
    "SW": (51.47, -0.19), "SW1": (51.4977, -0.1376),
    "W": (51.51, -0.21), "W1": (51.5136, -0.141),
    "WC": (51.515, -0.12), "WC1": (51.5235, -0.1249), "WC2": (51.513, -0.1223),
    # North East
    "NE": (54.97, -1.61),
    "NE1": (54.9739, -1.6131), "NE2": (54.9869, -1.5994), "NE3": (55.0071, -1.6268),
    "NE4": (54.9818, -1.6356), "NE5": (54.9965, -1.6769), "NE6": (54.9776, -1.5612),
    "NE7": (54.997, -1.5768), "NE8": (54.958, -1.6055), "NE10": (54.9464, -1.5539),
    "NE11": (54.9373, -1.6429), "NE12": (55.0177, -1.5684), "NE13": (55.0483, -1.6538),
    "NE15": (54.9859, -1.7187), "NE16": (54.946, -1.7172), "NE20": (55.0507, -1.7685),
    "NE21": (54.9591, -1.751), "NE22": (55.1366, -1.5911), "NE23": (55.0815, -1.5824),
    "NE24": (55.1204, -1.5223), "NE25": (55.0696, -1.4741), "NE26": (55.0432, -1.4528),
    "NE27": (55.0343, -1.5044), "NE28": (54.9923, -1.5098), "NE29": (55.0126, -1.4583),
    "NE30": (55.0205, -1.4389), "NE31": (54.9785, -1.484), "NE32": (54.9602, -1.4828),
    "NE33": (54.9974, -1.428), "NE34": (54.972, -1.4167), "NE35": (54.9489, -1.4534),
    "NE36": (54.9399, -1.4368), "NE37": (54.9003, -1.523), "NE38": (54.8931, -1.5495),
    "NE39": (54.9213, -1.8217), "NE40": (54.9747, -1.8079), "NE41": (54.9735, -1.8836),
    "NE42": (54.9629, -1.8448), "NE43": (54.9533, -1.906), "NE44": (54.9601, -2.0156),
    "NE45": (54.9716, -2.0244), "NE46": (54.9719, -2.1035), "NE47": (54.9694, -2.2453),
    "NE48": (55.1406, -2.2574), "NE49": (54.9712, -2.4601),
    "SR": (54.90, -1.38),
    "SR1": (54.9062, -1.3819), "SR2": (54.8944, -1.377), "SR3": (54.8835, -1.4101),
    "SR4": (54.8997, -1.4216), "SR5": (54.9228, -1.4175), "SR6": (54.9346, -1.3845),
    "SR7": (54.8179, -1.3644), "SR8": (54.7624, -1.342),
    "DH": (54.78, -1.58), "DH1": (54.7787, -1.5785),
    "TS": (54.57, -1.24), "TS1": (54.574, -1.238),
    # West Midlands
    "B": (52.48, -1.89), "B1": (52.4791, -1.9098), "B2": (52.4826, -1.898),
    "B3": (52.4852, -1.9034), "B4": (52.4873, -1.8935), "B5": (52.4707, -1.8954),
    "B6": (52.5071, -1.8887), "B10": (52.4669, -1.8626), "B13": (52.4377, -1.8763),
    "B15": (52.4684, -1.9266), "B17": (52.4557, -1.9542), "B23": (52.5336, -1.8439),
    "B29": (52.4298, -1.9385), "B33": (52.4699, -1.7823), "B37": (52.4694, -1.753),
    "B60": (52.3219, -1.9513), "B70": (52.5168, -2.0072), "B73": (52.5434, -1.8352),
    "B77": (52.6067, -1.6723), "B90": (52.4081, -1.8219), "B91": (52.4133, -1.7747),
    "B97": (52.3016, -1.9491),
    "CV": (52.40, -1.51), "WV": (52.59, -2.11), "DY": (52.51, -2.13),
    # Essex and east London fringe
    "RM": (51.559, 0.209), "RM1": (51.5769, 0.1849), "RM3": (51.596, 0.2196),
    "RM8": (51.5468, 0.1301), "RM12": (51.5539, 0.216), "RM14": (51.5559, 0.2636),
    "RM17": (51.4808, 0.2875), "RM18": (51.4711, 0.374),
    "SS": (51.54, 0.71), "SS0": (51.5384, 0.701), "SS1": (51.5369, 0.7291),
    "SS6": (51.583, 0.5885), "SS9": (51.5423, 0.6427), "SS14": (51.5726, 0.4792),
    "CM": (51.87, 0.55), "CM1": (51.7476, 0.4502), "CM2": (51.7223, 0.4777),
    "CO": (51.89, 0.90), "IG": (51.56, 0.05), "EN": (51.65, -0.09),
    # Peterborough and the fens
    "PE": (52.58, -0.25),
    "PE1": (52.5786, -0.2404), "PE2": (52.5556, -0.2403), "PE3": (52.5793, -0.2762),
    "PE4": (52.6106, -0.2625), "PE5": (52.5659, -0.3887), "PE6": (52.6816, -0.2634),
    "PE7": (52.55, -0.18), "PE8": (52.5113, -0.4363), "PE9": (52.651, -0.4759),
    "PE10": (52.7675, -0.3769), "PE11": (52.7958, -0.2011), "PE12": (52.8086, -0.0307),
    "PE13": (52.6721, 0.1463), "PE14": (52.6409, 0.2211), "PE15": (52.551, 0.118),
    "PE16": (52.4563, 0.0514), "PE19": (52.2293, -0.2581), "PE20": (52.9619, -0.075),
    "PE21": (52.9749, -0.0293), "PE22": (53.0581, 0.0406), "PE23": (53.1724, 0.11),
    "PE24": (53.1461, 0.3305), "PE25": (53.1455, 0.3388), "PE26": (52.435, -0.1146),
    "PE27": (52.329, -0.0713), "PE28": (52.3558, -0.1865), "PE29": (52.3308, -0.185),
    "PE30": (52.7525, 0.4088), "PE31": (52.8488, 0.6599), "PE32": (52.6904, 0.5743),
    "PE33": (52.6251, 0.4966), "PE34": (52.6207, 0.354), "PE35": (52.8263, 0.5126),
    "PE36": (52.9354, 0.4932), "PE37": (52.6317, 0.7027), "PE38": (52.5949, 0.3782),
    # Other major areas
    "M": (53.483959, -2.244644), "LS": (53.801277, -1.548567),
    "G": (55.860916, -4.251433), "EH": (55.953251, -3.188267),
    "L": (53.408371, -2.991573), "BS": (51.454514, -2.58791),
    "S": (53.381129, -1.470085), "CF": (51.481583, -3.17909),
    "BT": (54.597285, -5.93012), "NG": (52.954784, -1.158109),
    "SO": (50.909698, -1.404351), "BN": (50.82253, -0.137163),
    "OX": (51.752022, -1.257677), "CB": (52.205337, 0.121817),
    "YO": (53.961304, -1.07996), "LE": (52.636878, -1.139759),
    "AB": (57.149651, -2.099075), "NN": (52.240479, -0.902656),
    "SA": (51.621441, -3.943646), "NP": (51.58849, -2.99766),
    "DD": (56.462002, -2.9707), "IV": (57.477772, -4.224721),
    "PL": (50.375456, -4.142656), "EX": (50.725554, -3.526762),
    "BH": (50.720806, -1.880734), "RG": (51.458733, -0.972957),
    "MK": (52.040623, -0.759417), "CT": (51.275832, 1.087978),
})

CITY_CENTROIDS = MappingProxyType({
    "london": (51.507351, -0.127758), "manchester": (53.483959, -2.244644),
    "birmingham": (52.486243, -1.890401), "leeds": (53.801277, -1.548567),
    "glasgow": (55.860916, -4.251433), "edinburgh": (55.953251, -3.188267),
    "liverpool": (53.408371, -2.991573), "bristol": (51.454514, -2.58791),
    "sheffield": (53.381129, -1.470085), "cardiff": (51.481583, -3.17909),
    "belfast": (54.597285, -5.93012), "newcastle": (54.978252, -1.61778),
    "sunderland": (54.906869, -1.383801), "durham": (54.777065, -1.57855),
    "gateshead": (54.95297, -1.603624), "middlesbrough": (54.574227, -1.235298),
    "brighton": (50.82253, -0.137163), "portsmouth": (50.816667, -1.083333),
    "southampton": (50.909698, -1.404351), "oxford": (51.752022, -1.257677),
    "cambridge": (52.205337, 0.121817), "reading": (51.458733, -0.972957),
    "milton keynes": (52.040623, -0.759417), "canterbury": (51.275832, 1.087978),
    "plymouth": (50.375456, -4.142656), "exeter": (50.725554, -3.526762),
    "bournemouth": (50.720806, -1.880734), "bath": (51.380001, -2.360002),
    "gloucester": (51.864445, -2.244444), "swindon": (51.558376, -1.781049),
    "nottingham": (52.954784, -1.158109), "leicester": (52.636878, -1.139759),
    "coventry": (52.408054, -1.510556), "stoke": (53.002666, -2.179404),
    "wolverhampton": (52.58497, -2.12882), "derby": (52.921619, -1.47646),
    "northampton": (52.240479, -0.902656), "peterborough": (52.569498, -0.240530),
    "preston": (53.7632, -2.70345), "bolton": (53.578003, -2.429251),
    "chester": (53.193392, -2.893075), "carlisle": (54.892473, -2.932931),
    "york": (53.961304, -1.07996), "bradford": (53.795984, -1.759398),
    "hull": (53.745671, -0.336741), "doncaster": (53.52282, -1.128462),
    "aberdeen": (57.149651, -2.099075), "dundee": (56.462002, -2.9707),
    "stirling": (56.116943, -3.936765), "inverness": (57.477772, -4.224721),
    "swansea": (51.621441, -3.943646), "newport": (51.58849, -2.99766),
    "wrexham": (53.04604, -2.992494),
})

LONDON_AREAS = frozenset({"E", "EC", "N", "NW", "SE", "SW", "W", "WC"})
SCOTLAND_AREAS = frozenset({
    "AB", "DD", "DG", "EH", "FK", "G", "IV", "KA", "KW", "KY", "ML", "PA", "PH", "TD", "ZE",
})
WALES_AREAS = frozenset({"CF", "LD", "LL", "NP", "SA"})

REGION_MARKERS = MappingProxyType({
    "london": ("london",),
    "scotland": ("scotland", "edinburgh", "glasgow", "aberdeen", "dundee", "inverness", "stirling"),
    "wales": ("wales", "cardiff", "swansea", "wrexham"),
})


@dataclass(frozen=True)
class GeoTables:
    """Reference data injected into the distance estimator."""

    city_distances: Mapping = field(default_factory=lambda: CITY_DISTANCES)
    postcode_centroids: Mapping = field(default_factory=lambda: POSTCODE_CENTROIDS)
    city_centroids: Mapping = field(default_factory=lambda: CITY_CENTROIDS)
    cities: tuple = UK_CITIES

    winding_factors: Mapping = field(default_factory=lambda: MappingProxyType({
        "london": 1.4,
        "scotland": 1.5,
        "wales": 1.45,
        "urban": 1.35,
        "default": 1.3,
        "long_haul": 1.2,
    }))
    urban_straight_miles: float = 10.0
    long_haul_straight_miles: float = 100.0

    # (upper bound in miles, value); the last entry applies beyond every bound
    speed_bands: tuple = ((10.0, 18.0), (30.0, 25.0), (100.0, 35.0), (float("inf"), 45.0))
    loading_bands: tuple = ((20.0, 30), (50.0, 45), (100.0, 60), (float("inf"), 75))

    congested_areas: Mapping = field(default_factory=lambda: MappingProxyType({
        "london": 20,
        "brighton": 15,
    }))
    long_journey_miles: float = 50.0
    long_journey_delay_minutes: int = 10
    rush_hour_minutes: int = 15
    rush_hours: tuple = ((7, 10), (16, 19))
    break_every_minutes: int = 120
    break_minutes: int = 15

    journey_time_overrides: Mapping = field(default_factory=lambda: MappingProxyType({
        frozenset(("northampton", "brighton")): 159,
        frozenset(("northampton", "london")): 82,
        frozenset(("PE25ET", "PE78BA")): 15,
    }))

    surcharge_districts: frozenset = frozenset({
        "EC1", "EC2", "EC3", "EC4", "WC1", "WC2", "W1", "SW1", "SE1",
    })
    surcharge_markers: tuple = (
        "central london", "city of london", "westminster", "congestion zone",
    )

    central_point: tuple = CENTRAL_UK
    min_distance_miles: float = MIN_DISTANCE_MILES


DEFAULT_TABLES = GeoTables()
