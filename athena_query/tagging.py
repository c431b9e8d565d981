# Copyright Amazon.com and its affiliates; all rights reserved. This file is Amazon Web Services Content and may not be duplicated or distributed without permission.
# SPDX-License-Identifier: MIT-0
PRODUCT = 'Product'
DESCRIPTION = 'Description'
URL = 'URL'

PRODUCT_NAME = 'athena-query-action'
PROJECT_URL = 'https://github.com/cebollia/athena-query-action'


def get_tag(tag_name: str) -> dict:
    """Get a provenance tag for resources created by the action

    tag_name
        The name of the tag (must exist in tag_map)

    Raises
    ------
    AttributeError
        If tag name is not present in the tag_map below

    Returns
    -------
    dict
        Key and Value entry in the form expected by AWS tagging APIs
    """
    tag_map = {
        PRODUCT: PRODUCT_NAME,
        DESCRIPTION: 'Track Athena query state during pipeline runs.',
        URL: PROJECT_URL,
    }
    if tag_name not in tag_map:
        raise AttributeError(f'Tag map does not contain a value for {tag_name}')

    return { 'Key': tag_name, 'Value': tag_map[tag_name] }


def get_tags() -> list:
    """Return the full list of provenance tags for a created resource
    """
    return [ get_tag(tag_name) for tag_name in [ PRODUCT, DESCRIPTION, URL ] ]
