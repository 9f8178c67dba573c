"""Camera module for primary ray generation.

Components:
    pinhole: Fixed pinhole camera mapping pixels onto the view plane

Pixel coordinates use a bottom-left origin:
    ix in [0, width): left to right
    iy in [0, height): bottom to top

The pinhole module keeps the view plane in Taichi fields, so it is NOT
imported here. Import it directly after ti.init():
    from whitted.camera.pinhole import setup_camera
"""
