"""
Example showing how to compose NamedRoutes registries across mounted apps.
"""

from __future__ import annotations

from types import SimpleNamespace

from namedroutes import Registry, RoutedClass, route


class BlogApp(RoutedClass):
    def __init__(self):
        self.routes = Registry(self, name="routes", name_prefix="show_")

    @route("routes", "/")
    def show_index(self, request):
        return request.route_to_path("post", {"slug": "hello"})

    @route("routes", "/posts/:slug")
    def show_post(self, request):
        return request.route_to_path("post")

    @route("routes", "/tags/:tag", name="tags.show")
    def tag(self, request):
        return request.route_to_path("tags.show")


class SiteApp(RoutedClass):
    def __init__(self):
        self.routes = Registry(self, name="site").plug("logging", flags="before:off")
        self.routes.define("home", "/")
        self.routes.define("user", {"show": "/users/:id", "edit": "/users/:id/edit"})
        self.blog = BlogApp()
        self.routes.mount_instance(self.blog, "blog", prefix="/blog/")

    def dispatch(self, request, handler):
        with self.routes.handle(request):
            with self.blog.routes.handle(request):
                return handler(request)


if __name__ == "__main__":
    site = SiteApp()
    request = SimpleNamespace(params={"slug": "news", "id": "7"})

    print(site.routes.path_for("blog.post", {"slug": "intro"}))
    print(site.dispatch(request, site.blog.show_index))
    print(site.dispatch(request, site.blog.show_post))
    print(site.dispatch(request, lambda req: req.route_to_path("user.edit")))
    print(site.routes.members()["children"]["blog"]["entries"].keys())
