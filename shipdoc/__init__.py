"""shipdoc: spreadsheet order exports -> carrier shipment documents.

Also parses marketplace product-template workbooks into field metadata.
"""

__version__ = "0.1.0"
