"""Test module for xml_beautifier package initialization."""


def test_package_import() -> None:
    """Test that the package can be imported successfully."""
    # Arrange & Act
    import xml_beautifier

    # Assert
    assert xml_beautifier is not None


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    # Arrange & Act
    import xml_beautifier

    # Assert
    assert isinstance(xml_beautifier.__version__, str)
    assert xml_beautifier.__version__ == "0.1.0"


def test_package_has_author() -> None:
    """Test that the package has an author attribute."""
    import xml_beautifier

    assert xml_beautifier.__author__ == "XML Beautifier Team"


def test_package_all_exports() -> None:
    """Test that every name in __all__ is importable from the package."""
    # Arrange & Act
    import xml_beautifier

    # Assert
    for name in xml_beautifier.__all__:
        assert hasattr(xml_beautifier, name), name
    assert "beautify" in xml_beautifier.__all__
    assert "XMLTreeBuilder" in xml_beautifier.__all__


def test_level_one_beautify() -> None:
    """Test the top-level beautify function end to end."""
    from xml_beautifier import beautify

    assert beautify("<a><b/></a>") == (
        '<?xml version="1.0" encoding="UTF-8"?>\n<a>\n  <b/>\n</a>'
    )
