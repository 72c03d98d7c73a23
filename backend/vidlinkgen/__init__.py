"""
VidLinkGen backend: shareable, access-controlled video links.
"""
