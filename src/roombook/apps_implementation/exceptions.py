#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
class ParseError(Exception):
    pass


class EventDefinitionError(Exception):
    pass


class SearchError(Exception):
    pass
