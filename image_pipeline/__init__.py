"""
Cloudinary image helpers: upload, delivery URLs and animated GIF assembly.
"""
