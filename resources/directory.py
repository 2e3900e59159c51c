from resources.models import Resource


def get_resource(resource_id):
    """
    Returns the resource with the given id, or None when it does not exist.
    """
    try:
        return Resource.objects.get(pk=resource_id)
    except (Resource.DoesNotExist, ValueError, TypeError):
        return None


def resources_for_department(department):
    return Resource.objects.filter(department=department)


def serialize_resource(resource):
    return {
        "id": resource.id,
        "name": resource.name,
        "department": resource.department,
        "type": resource.type,
        "capacity": resource.capacity,
        "features": resource.features,
        "description": resource.description,
    }
