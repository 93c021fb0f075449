"""
Host primitives available to programs.

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Programs never touch `State` directly; they read and write the storage of
the account they run on, emit logs, and make nested calls through the
functions in this package. Every primitive operates on the `Evm` frame of
the running message.
"""
