"""
Tests for the JSON serializer – request flattening and typed response parsing.
"""

import json
import random
import unittest

from arcgis_gateway.errors import ArcGISError, ErrorKind, SerializationError
from arcgis_gateway.operation import (
    ApplyEdits,
    Feature,
    Find,
    Query,
    QueryForIds,
    QueryForIdsResponse,
    QueryResponse,
    RawResponse,
    ReverseGeocode,
    SiteFolderDescription,
    SpatialReference,
)
from arcgis_gateway.serializer import JsonSerializer

LAYER = "Petroleum/KSPetro/MapServer/0"


class TestSerialize(unittest.TestCase):
    def setUp(self):
        self.serializer = JsonSerializer()

    def test_common_parameters(self):
        params = self.serializer.serialize(Query(LAYER))
        self.assertEqual(params["f"], "json")
        self.assertEqual(params["where"], "1=1")
        self.assertEqual(params["outFields"], "*")
        self.assertEqual(params["returnGeometry"], "true")
        self.assertNotIn("token", params)
        self.assertNotIn("callback", params)

    def test_token_object_reduced_to_value(self):
        class _Token:
            value = "abc123"

        params = self.serializer.serialize(Query(LAYER, token=_Token()))
        self.assertEqual(params["token"], "abc123")

    def test_csv_fields_stay_comma_joined_on_post(self):
        query = Query(LAYER, object_ids=[1, 2, 3], out_fields=["NAME", "DEPTH"])
        for method in ("GET", "POST"):
            params = self.serializer.serialize(query, method)
            self.assertEqual(params["objectIds"], "1,2,3")
            self.assertEqual(params["outFields"], "NAME,DEPTH")

    def test_lists_are_json_arrays_on_post(self):
        self.assertEqual(self.serializer.encode_value([1, 2], "POST"), "[1,2]")
        self.assertEqual(self.serializer.encode_value([1, 2], "GET"), "1,2")

    def test_nested_objects_are_json_encoded(self):
        geometry = {"x": -97.1, "y": 38.5, "spatialReference": {"wkid": 4326}}
        params = self.serializer.serialize(Query(LAYER, geometry=geometry, out_sr=SpatialReference.WEB_MERCATOR))
        self.assertEqual(json.loads(params["geometry"]), geometry)
        self.assertEqual(params["geometryType"], "esriGeometryPoint")
        self.assertEqual(params["spatialRel"], "esriSpatialRelIntersects")
        self.assertEqual(params["outSR"], '{"wkid":102100,"latestWkid":3857}')

    def test_features_encoded_for_apply_edits(self):
        edits = ApplyEdits(LAYER, adds=[Feature({"NAME": "well"}, {"x": 1, "y": 2})], deletes=[7, 8])
        params = self.serializer.serialize(edits, "POST")
        self.assertEqual(json.loads(params["adds"]), [{"attributes": {"NAME": "well"}, "geometry": {"x": 1, "y": 2}}])
        self.assertEqual(params["deletes"], "7,8")

    def test_booleans_lowercase(self):
        params = self.serializer.serialize(QueryForIds(LAYER))
        self.assertEqual(params["returnIdsOnly"], "true")
        self.assertEqual(params["returnGeometry"], "false")


class TestDeserialize(unittest.TestCase):
    def setUp(self):
        self.serializer = JsonSerializer()

    def test_typed_fields(self):
        body = json.dumps({
            "objectIdFieldName": "OBJECTID",
            "geometryType": "esriGeometryPoint",
            "spatialReference": {"wkid": 102100, "latestWkid": 3857},
            "fields": [{"name": "OBJECTID", "type": "esriFieldTypeOID"}],
            "features": [{"attributes": {"OBJECTID": 1}, "geometry": {"x": 1, "y": 2}}],
        })
        response = self.serializer.deserialize(body, QueryResponse)
        self.assertTrue(response.ok)
        self.assertEqual(response.spatial_reference, SpatialReference.WEB_MERCATOR)
        self.assertEqual(response.features[0].attributes, {"OBJECTID": 1})
        self.assertEqual(response.fields[0].name, "OBJECTID")
        self.assertFalse(response.exceeded_transfer_limit)
        self.assertEqual(response["objectIdFieldName"], "OBJECTID")

    def test_error_body_is_data(self):
        body = json.dumps({"error": {
            "code": 400, "message": "Unable to complete operation.",
            "details": ["Unable to perform query operation."],
        }})
        response = self.serializer.deserialize(body, QueryResponse)
        self.assertFalse(response.ok)
        self.assertIsInstance(response.error, ArcGISError)
        self.assertEqual(response.error.code, 400)
        self.assertEqual(response.error.details, ["Unable to perform query operation."])
        self.assertEqual(response.error.kind, ErrorKind.DOMAIN)
        self.assertIn("Unable to complete operation.", str(response.error))

    def test_bytes_body(self):
        response = self.serializer.deserialize(b'{"folders": ["A"]}', SiteFolderDescription)
        self.assertEqual(response.folders, ["A"])

    def test_invalid_json(self):
        with self.assertRaises(SerializationError) as ctx:
            self.serializer.deserialize("<html>Not found</html>", QueryResponse, "http://host/x")
        self.assertEqual(ctx.exception.kind, ErrorKind.SERIALIZATION)
        self.assertEqual(ctx.exception.url, "http://host/x")

    def test_not_an_object(self):
        with self.assertRaises(SerializationError):
            self.serializer.deserialize("[1, 2]", QueryResponse)

    def test_wrong_shape(self):
        with self.assertRaises(SerializationError):
            self.serializer.deserialize('{"services": [{"name": "A"}]}', SiteFolderDescription)

    def test_object_ids_survive_round_trip(self):
        rng = random.Random(20)
        ids = rng.sample(range(1, 100000), 25)
        params = JsonSerializer().serialize(Query(LAYER, object_ids=ids))
        echoed = [int(v) for v in params["objectIds"].split(",")]
        body = json.dumps({"objectIdFieldName": "OBJECTID", "objectIds": echoed})
        response = self.serializer.deserialize(body, QueryForIdsResponse)
        self.assertEqual(response.object_ids, ids)


def _word(rng, size=8):
    return "".join(rng.choice("abcdefghijklmnopqrstuvwxyzÅé_ ") for _ in range(size)).strip() or "x"


def _spatial_reference(rng):
    wkid = rng.choice([4326, 102100, 2263, 26914])
    return SpatialReference(wkid, rng.choice([None, 3857, wkid]))


def _point(rng):
    return {"x": rng.uniform(-180, 180), "y": rng.uniform(-90, 90),
            "spatialReference": {"wkid": 4326}}


def _decode(raw, value, csv, method):
    """Rebuild a Python value from its wire string, guided by the value that was sent."""
    if isinstance(value, bool):
        return {"true": True, "false": False}[raw]
    if isinstance(value, int):
        return int(raw)
    if isinstance(value, float):
        return float(raw)
    if isinstance(value, str):
        return raw
    if isinstance(value, SpatialReference):
        return SpatialReference.from_json(json.loads(raw))
    if isinstance(value, list):
        if csv or method == "GET":
            kind = type(value[0])
            return [kind(v) for v in raw.split(",")]
        return json.loads(raw)
    return json.loads(raw)


class TestRoundTrip(unittest.TestCase):
    """Every field that is set comes back unchanged after GET and POST encoding."""

    def setUp(self):
        self.serializer = JsonSerializer()
        self.rng = random.Random(8145)

    def _random_query(self):
        rng = self.rng
        return Query(
            LAYER,
            where=f"{_word(rng)} > {rng.randint(-1000, 1000)}",
            object_ids=rng.sample(range(1, 10 ** 6), rng.randint(1, 20)),
            geometry=_point(rng),
            in_sr=_spatial_reference(rng),
            out_sr=_spatial_reference(rng),
            out_fields=[_word(rng) for _ in range(rng.randint(1, 5))],
            order_by_fields=[_word(rng) + rng.choice([" ASC", " DESC"])],
            result_offset=rng.randint(0, 5000),
            result_record_count=rng.randint(1, 2000),
            distance=rng.uniform(0, 10000),
            units="esriSRUnit_Meter",
            max_allowable_offset=rng.uniform(0, 5),
            geometry_precision=rng.randint(0, 8),
            return_geometry=rng.random() < 0.5,
            return_z=rng.random() < 0.5,
            return_m=rng.random() < 0.5,
            return_distinct_values=rng.random() < 0.5,
            token=_word(rng, 40),
            callback=_word(rng),
        )

    def _random_find(self):
        rng = self.rng
        return Find(
            "Petroleum/KSPetro/MapServer",
            search_text=_word(rng, 12),
            contains=rng.random() < 0.5,
            search_fields=[_word(rng) for _ in range(rng.randint(1, 4))],
            layers=rng.sample(range(0, 50), rng.randint(1, 6)),
            sr=_spatial_reference(rng),
            layer_defs={str(rng.randint(0, 9)): f"{_word(rng)} = {rng.randint(0, 99)}"},
            return_geometry=rng.random() < 0.5,
            max_allowable_offset=rng.uniform(0, 5),
            return_z=rng.random() < 0.5,
        )

    def _random_reverse_geocode(self):
        rng = self.rng
        return ReverseGeocode(
            "Locators/World/GeocodeServer",
            location=_point(rng),
            distance=rng.uniform(1, 500),
            out_sr=_spatial_reference(rng),
            lang_code=rng.choice(["en", "fr", "de"]),
            feature_types=rng.sample(["PointAddress", "StreetAddress", "POI", "Locality"], 2),
        )

    def _assert_round_trip(self, request, method):
        params = self.serializer.serialize(request, method)
        response = self.serializer.deserialize(json.dumps(params), RawResponse)

        sent = [(f, name, value) for f, name, value in request.wire_fields() if value is not None]
        self.assertEqual(set(response.raw), {name for _, name, _ in sent})
        for f, name, value in sent:
            with self.subTest(type=type(request).__name__, method=method, field=name):
                decoded = _decode(response.raw[name], value, f.metadata.get("csv", False), method)
                self.assertEqual(decoded, value)

    def test_randomized_requests(self):
        builders = (self._random_query, self._random_find, self._random_reverse_geocode)
        for _ in range(25):
            for build in builders:
                request = build()
                for method in ("GET", "POST"):
                    self._assert_round_trip(request, method)


if __name__ == "__main__":
    unittest.main()
