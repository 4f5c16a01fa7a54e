from exporters.dialect import JSXDialect


def test_normalize_type():
    dialect = JSXDialect()
    assert dialect.normalize_type("Mesh") == "mesh"
    assert dialect.normalize_type("Object3D") == "group"
    assert dialect.normalize_type("PointLight") == "pointLight"
    assert dialect.normalize_type("PerspectiveCamera") == "PerspectiveCamera"
    assert dialect.normalize_type("OrthographicCamera") == "OrthographicCamera"


def test_attributes():
    dialect = JSXDialect()
    assert dialect.expression("scale", "[1, 2, 1]") == "scale={[1, 2, 1]}"
    assert dialect.string("name", "Cube") == 'name="Cube"'
    assert dialect.string("name", 'say "hi"') == 'name={"say \\"hi\\""}'
    assert dialect.flag("castShadow") == "castShadow"


def test_elements():
    dialect = JSXDialect()
    assert dialect.element("mesh", [], "") == "<mesh />\n"
    assert dialect.element("group", ["visible={false}"], "<mesh />\n") == (
        "<group visible={false}>\n"
        "  <mesh />\n"
        "</group>\n"
    )
    assert dialect.reference("nodes.Hips") == "<primitive object={nodes.Hips} />\n"


def test_references():
    dialect = JSXDialect()
    assert dialect.node_ref("Cube") == "nodes.Cube"
    assert dialect.material_ref("Car Paint") == "materials['Car Paint']"
    assert dialect.instance_tag("Bolt1") == "instances.Bolt1"


def test_indent_block_skips_blank_lines():
    assert JSXDialect().indent_block("a\n\nb\n", 2) == "    a\n\n    b\n"
