from django.http import JsonResponse
from django.views.decorators.http import require_GET

from resources.directory import get_resource, resources_for_department, serialize_resource
from resources.models import Resource


@require_GET
def resource_list_view(request):

    department = request.GET.get("department")

    if department:
        resources = resources_for_department(department)
    else:
        resources = Resource.objects.all()

    return JsonResponse({"resources": [serialize_resource(r) for r in resources]})


@require_GET
def resource_detail_view(request, resource_id):

    resource = get_resource(resource_id)

    if resource is None:
        return JsonResponse({"error": "Resource not found"}, status=404)

    return JsonResponse(serialize_resource(resource))
