"""Tests for the Image value type."""

import pytest

import rasterexpr as rx
from rasterexpr import (
    DEFAULT_EXPRESSION_IMAGE,
    ApiFunction,
    ArgumentError,
    ArityError,
    CombineError,
    ComputedObject,
    GeoJSON,
    Image,
    Node,
    NodeKind,
)
from rasterexpr._image import (
    AssetInput,
    ConstantInput,
    EmptyInput,
    ExistingInput,
    SequenceInput,
    VersionedAssetInput,
    classify_image_args,
)


def constant(value: object) -> Node:
    return Node.call("Image.constant", {"value": Node.constant(value)})


def add_bands(dst: Node, src: Node) -> Node:
    return Node.call("Image.addBands", {"dstImg": dst, "srcImg": src})


class TestClassifyImageArgs:
    @pytest.mark.parametrize(
        ("args", "expected"),
        [
            ((), EmptyInput()),
            ((None,), EmptyInput()),
            ((5,), ConstantInput(5)),
            ((0.5,), ConstantInput(0.5)),
            (("abc",), AssetInput("abc")),
            (("abc", 3), VersionedAssetInput("abc", 3)),
            (([1, 2],), SequenceInput((1, 2))),
        ],
    )
    def test_shapes(self, args: tuple[object, ...], expected: object) -> None:
        assert classify_image_args(args) == expected

    def test_existing_graph_value(self) -> None:
        value = ComputedObject(Node.reference("x"), "Number")
        assert classify_image_args((value,)) == ExistingInput(value)

    def test_unrecognized_single_argument(self) -> None:
        with pytest.raises(ArgumentError, match="Unrecognized argument type to convert to an Image"):
            classify_image_args(({"a": 1},))

    def test_boolean_is_not_a_constant(self) -> None:
        with pytest.raises(ArgumentError, match="Unrecognized argument type"):
            classify_image_args((True,))

    def test_unrecognized_pair(self) -> None:
        with pytest.raises(ArgumentError, match="Unrecognized argument types"):
            classify_image_args((1, "abc"))

    def test_too_many_arguments(self) -> None:
        with pytest.raises(ArityError, match=r"at most 2 arguments \(3 given\)"):
            classify_image_args(("abc", 1, 2))


class TestConstruction:
    def test_identity(self) -> None:
        image = Image("abc")
        assert Image(image) is image

    def test_empty_image_is_masked_constant(self) -> None:
        expected = Node.call("Image.mask", {"image": constant(0), "mask": constant(0)})
        assert Image().node == expected
        assert Image(None).node == expected

    def test_constant(self) -> None:
        assert Image(5).node == constant(5)

    def test_asset(self) -> None:
        assert Image("abc").node == Node.call("Image.load", {"id": Node.constant("abc")})

    def test_versioned_asset(self) -> None:
        assert Image("abc", 3).node == Node.call(
            "Image.load",
            {"id": Node.constant("abc"), "version": Node.constant(3)},
        )

    def test_sequence_is_combined(self) -> None:
        a, b, c = Image(1), Image(2), Image(3)

        image = Image([a, b, c])

        assert image.node == Image.combine([a, b, c]).node
        assert image.node == add_bands(add_bands(a.node, b.node), c.node)

    def test_sequence_elements_are_converted(self) -> None:
        assert Image([1, "abc"]).node == add_bands(constant(1), Image("abc").node)

    def test_array_becomes_constant_image(self) -> None:
        array = ApiFunction.call_("Array.identity", 2)
        assert Image(array).node == Node.call("Image.constant", {"value": array.node})

    def test_other_graph_value_is_reinterpreted(self) -> None:
        value = ComputedObject(Node.call("Image.pixelLonLat", {}), "Object")

        image = Image(value)

        assert image.node is value.node
        assert image.name() == "Image"

    def test_equality_and_hash(self) -> None:
        assert Image("abc") == Image("abc")
        assert hash(Image("abc")) == hash(Image("abc"))
        assert Image("abc") != Image("abd")

    def test_operations_do_not_modify_inputs(self) -> None:
        image = Image(1)
        before = image.node

        image.add(2)

        assert image.node is before

    def test_repr(self) -> None:
        assert repr(Image("abc")) == "Image<Image: Image.load>"


class TestCombine:
    def test_empty(self) -> None:
        with pytest.raises(CombineError, match="Can't combine 0 images."):
            Image.combine([])

    def test_combine_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            Image.combine([])

    def test_single_image(self) -> None:
        image = Image(1)
        assert Image.combine([image]) is image

    def test_names_select_all_bands(self) -> None:
        combined = Image.combine([1, 2], ["a", "b"])

        assert combined.node == Node.call(
            "Image.select",
            {
                "input": add_bands(constant(1), constant(2)),
                "bandSelectors": Node.constant((".*",)),
                "newNames": Node.constant(("a", "b")),
            },
        )

    def test_rgb(self) -> None:
        r, g, b = Image("r"), Image("g"), Image("b")
        assert Image.rgb(r, g, b) == Image.combine([r, g, b], ["vis-red", "vis-green", "vis-blue"])

    def test_cat(self) -> None:
        assert Image.cat(1, 2, 3) == Image.combine([1, 2, 3])


class TestSelect:
    def test_spread_equals_list(self) -> None:
        image = Image("abc")
        assert image.select("B1", "B2") == image.select(["B1", "B2"])

    def test_single_selector(self) -> None:
        node = Image("abc").select("B1").node
        assert node.arguments["bandSelectors"] == Node.constant(("B1",))
        assert "newNames" not in node.arguments

    def test_index_selectors(self) -> None:
        node = Image("abc").select(0, 2).node
        assert node.arguments["bandSelectors"] == Node.constant((0, 2))

    def test_rename(self) -> None:
        node = Image("abc").select(["B1"], ["blue"]).node
        assert node.arguments["newNames"] == Node.constant(("blue",))

    def test_no_selectors(self) -> None:
        node = Image("abc").select().node
        assert node.arguments["bandSelectors"] == Node.constant(())

    def test_illegal_selector(self) -> None:
        with pytest.raises(ArgumentError, match="Illegal argument to select"):
            Image("abc").select([1, object()])

    def test_illegal_spread_selector(self) -> None:
        with pytest.raises(ArgumentError, match="Illegal argument to select"):
            Image("abc").select("B1", object())

    def test_boolean_is_not_a_selector(self) -> None:
        with pytest.raises(ArgumentError, match="Cannot promote True to List"):
            Image("abc").select(True)

    def test_extra_arguments_after_list(self) -> None:
        with pytest.raises(ArityError):
            Image("abc").select(["B1"], ["blue"], "extra")


class TestExpression:
    def test_call_over_parsed_expression(self) -> None:
        image = Image("abc")
        other = Image("def")

        result = image.expression("b1+b2", {"b2": other})

        assert isinstance(result, Image)
        node = result.node
        assert node.kind == NodeKind.CALL
        assert isinstance(node.callee, Node)
        assert node.callee == Node.call(
            "Image.parseExpression",
            {
                "expression": Node.constant("b1+b2"),
                "argName": Node.constant(DEFAULT_EXPRESSION_IMAGE),
                "vars": Node.constant((DEFAULT_EXPRESSION_IMAGE, "b2")),
            },
        )
        assert dict(node.arguments) == {DEFAULT_EXPRESSION_IMAGE: image.node, "b2": other.node}

    def test_synthesized_signature(self) -> None:
        result = Image("abc").expression("b1+b2", {"b2": 5})

        signature = result.node.signature
        assert signature is not None
        assert signature.arity == 2
        assert [param.declared_type for param in signature.args] == ["Image", "Image"]
        assert signature.return_type == "Image"

    def test_variables_are_converted_to_images(self) -> None:
        result = Image("abc").expression("b1+b2", {"b2": 5})
        assert result.node.arguments["b2"] == constant(5)

    def test_without_variables(self) -> None:
        result = Image("abc").expression("b('B1') * 2")
        assert list(result.node.arguments) == [DEFAULT_EXPRESSION_IMAGE]

    def test_reserved_name(self) -> None:
        with pytest.raises(ArgumentError, match=DEFAULT_EXPRESSION_IMAGE):
            Image("abc").expression("x", {DEFAULT_EXPRESSION_IMAGE: 1})


class TestClip:
    def test_geojson_becomes_geometry(self) -> None:
        point = {"type": "Point", "coordinates": [1, 2]}

        node = Image("abc").clip(point).node

        assert node.operation_name == "Image.clip"
        geometry = node.arguments["geometry"]
        assert geometry.kind == NodeKind.CONSTANT
        assert isinstance(geometry.value, GeoJSON)
        assert geometry.value.to_dict() == point

    def test_geometry_value(self) -> None:
        geometry = rx.Geometry({"type": "Point", "coordinates": [1, 2]})
        node = Image("abc").clip(geometry).node
        assert node.arguments["geometry"] is geometry.node

    def test_opaque_value_is_forwarded(self) -> None:
        opaque = object()
        node = Image("abc").clip(opaque).node
        assert node.arguments["geometry"].value is opaque

    def test_remote_value_is_forwarded(self) -> None:
        collection = ComputedObject(Node.reference("fc"), "FeatureCollection")
        node = Image("abc").clip(collection).node
        assert node.arguments["geometry"] is collection.node


class TestBoundMembers:
    def test_static_operation_on_class(self) -> None:
        assert Image.pixelLonLat().node == Node.call("Image.pixelLonLat", {})

    def test_receiver_is_first_argument(self) -> None:
        image = Image(1)
        assert image.mask(Image(2)).node == Node.call(
            "Image.mask",
            {"image": image.node, "mask": constant(2)},
        )

    def test_window_operations_are_prefixed(self) -> None:
        image = Image(1)

        node = image.focal_max(radius=3).node

        assert node == Node.call("Window.max", {"image": image.node, "radius": Node.constant(3)})
        assert not hasattr(Image, "max")

    def test_hand_written_members_win(self) -> None:
        assert not isinstance(Image.__dict__["select"], rx.BoundOperation)
        assert not isinstance(Image.__dict__["clip"], rx.BoundOperation)
        assert "select" not in rx.bound_members(Image)

    def test_generated_documentation(self) -> None:
        doc = Image.add.__doc__
        assert doc is not None
        assert doc.startswith("Adds the second value to the first")
        assert "    image2 (Image)" in doc

    def test_construction_requires_registry(self) -> None:
        rx.reset()
        with pytest.raises(rx.RegistryError):
            Image(1)
