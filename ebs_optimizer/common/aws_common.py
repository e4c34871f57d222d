"""
Tag conversion and pagination helpers shared by the EC2 callers.
"""


def to_tag_list(tags):
    """Convert a tag dict to the EC2 ``[{'Key', 'Value'}]`` list."""
    return [{"Key": key, "Value": value} for key, value in tags.items()]


def paginate(client, operation_name, result_key, **kwargs):
    """
    Run a paginated describe call to the end and flatten the pages.

    Args:
        client: Boto3 client exposing ``get_paginator``
        operation_name: e.g. 'describe_volumes'
        result_key: List key in each page, e.g. 'Volumes'
        **kwargs: Passed through to ``paginate`` (Filters, OwnerIds)

    Returns:
        list: Items of every page, in page order
    """
    items = []
    for page in client.get_paginator(operation_name).paginate(**kwargs):
        items.extend(page.get(result_key, []))
    return items
