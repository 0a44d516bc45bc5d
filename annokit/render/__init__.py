"""Indexed-colour software rendering: palettes, framebuffer, camera, sprites and isometric map."""