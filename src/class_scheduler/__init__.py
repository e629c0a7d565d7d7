'''
Class Scheduler backend: subjects, classes, appointments with meeting
links, and notifications for an online tutoring business.

The ASGI application lives in class_scheduler.main:app.
'''
