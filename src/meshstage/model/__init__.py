"""
The MODEL layer contains pure data structures and business logic.
It has NO knowledge of any GPU API or window system.
It deals with Geometry, Meshes, Stages and I/O.
"""
