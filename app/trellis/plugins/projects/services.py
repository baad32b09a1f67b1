from trellis.core.services.resource import ResourceService


class ProjectsService(ResourceService):
    resource = "projects"
