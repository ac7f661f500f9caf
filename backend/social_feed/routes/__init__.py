from . import auth, posts, users

routers = [auth.router, posts.router, users.router]
